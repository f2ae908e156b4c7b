import logging

from flask import Blueprint, Response, jsonify, redirect, render_template, request

from .context import get_registry, get_resolver
from .errors import NotFound
from .names import is_reserved

logger = logging.getLogger(__name__)

public_bp = Blueprint('public', __name__)

CLI_AGENTS = ('curl', 'wget')


def script_response(entry):
    if entry.is_redirect:
        if not entry.redirect_url:
            logger.error('Redirect script "%s" has no redirect URL', entry.name)
            return jsonify(error='Invalid script configuration'), 500
        return redirect(entry.redirect_url, code=302)

    content = get_resolver().resolve(entry)
    response = Response(content, mimetype='text/plain')
    response.headers['Cache-Control'] = 'no-cache'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    return response


def lookup(name):
    entry = get_registry().get(name)
    if entry is None:
        raise NotFound('Script not found')
    return entry


@public_bp.route('/')
def index():
    scripts = get_registry().list()
    host = request.host_url.rstrip('/')
    user_agent = request.headers.get('User-Agent', '').lower()

    if any(agent in user_agent for agent in CLI_AGENTS):
        lines = ['AVAILABLE SCRIPTS', '=================']
        for entry in scripts:
            lines.append(f'  curl -fsSL {host}/{entry.name} | bash    # {entry.description}')
        if not scripts:
            lines.append('  (none yet)')
        return Response('\n'.join(lines) + '\n', mimetype='text/plain')

    return render_template('index.html', scripts=scripts, host=host)


@public_bp.route('/<script_name>')
def serve_script(script_name):
    if is_reserved(script_name):
        return jsonify(error='Script name conflicts with system routes'), 404
    entry = lookup(script_name)
    logger.info('Serving "%s" to %s', entry.name, request.remote_addr)
    return script_response(entry)
