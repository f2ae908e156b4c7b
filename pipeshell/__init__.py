import logging
import secrets
from datetime import timedelta
from types import SimpleNamespace

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from . import settings
from .api import api_bp
from .auth import auth_bp, hash_password
from .cli import hash_password_command
from .context import EXTENSION
from .errors import ScriptError
from .models import AdminCredentials
from .registry import ScriptRegistry
from .resolver import ContentResolver
from .store import ConfigStore
from .views import public_bp

logger = logging.getLogger(__name__)


def create_app(overrides=None):
    app = Flask(__name__, static_folder=None)
    app.config.update(settings.as_config())
    app.config.update(
        PERMANENT_SESSION_LIFETIME=timedelta(hours=settings.SESSION_HOURS),
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE='Lax',
        SESSION_REFRESH_EACH_REQUEST=False,
    )
    if overrides:
        app.config.update(overrides)

    if not app.config.get('SECRET_KEY'):
        logger.warning('SECRET_KEY is not set; sessions will not survive a restart')
        app.config['SECRET_KEY'] = secrets.token_hex(32)
    app.json.sort_keys = False

    def default_admin():
        logger.warning('Creating admin "%s" with the configured default password; change it!',
                       app.config['ADMIN_USERNAME'])
        return AdminCredentials(
            username=app.config['ADMIN_USERNAME'],
            password_hash=hash_password(app.config['ADMIN_PASSWORD']),
        )

    store = ConfigStore(app.config['CONFIG_PATH'], default_admin)
    registry = ScriptRegistry(store, app.config['SCRIPTS_DIR'])
    store.load()
    app.extensions[EXTENSION] = SimpleNamespace(
        store=store,
        registry=registry,
        resolver=ContentResolver(registry),
    )

    register_error_handlers(app)
    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(public_bp)
    app.cli.add_command(hash_password_command)
    return app


def register_error_handlers(app):
    @app.errorhandler(ScriptError)
    def handle_script_error(exc):
        if exc.status_code >= 500:
            logger.error('%s: %s', type(exc).__name__, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        if isinstance(exc, HTTPException):
            return exc
        logger.exception('Unhandled error')
        return jsonify(error='Internal server error'), 500
