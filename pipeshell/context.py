from flask import current_app

EXTENSION = 'pipeshell'


def _services():
    return current_app.extensions[EXTENSION]


def get_store():
    return _services().store


def get_registry():
    return _services().registry


def get_resolver():
    return _services().resolver
