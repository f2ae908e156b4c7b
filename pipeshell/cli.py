import logging

import click

from . import settings
from .auth import hash_password


@click.command('hash-password')
@click.argument('password')
def hash_password_command(password):
    """Print a bcrypt hash for PASSWORD.

    Paste the output into the "passwordHash" field of the config file.
    """
    click.echo(hash_password(password))


@click.command()
@click.option('--host', default=settings.HOST, show_default=True)
@click.option('--port', default=settings.PORT, show_default=True, type=int)
@click.option('--debug', is_flag=True)
def serve(host, port, debug):
    """Run the script server."""
    from . import create_app

    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    create_app().run(host=host, port=port, debug=debug)
