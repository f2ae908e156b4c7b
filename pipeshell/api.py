import logging
import os
import posixpath
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version

from flask import Blueprint, jsonify, request

from .auth import login_required
from .context import get_registry, get_resolver
from .errors import EmptyFolder, InvalidInput, InvalidType, IOFailure, NotFound
from .store import is_within
from .views import lookup, script_response

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__, url_prefix='/api')


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput('Request body must be a JSON object')
    return data


def _package_version():
    try:
        return version('pipeshell')
    except PackageNotFoundError:
        return 'unknown'


@api_bp.get('/health')
def health():
    return jsonify(
        status='ok',
        version=_package_version(),
        timestamp=datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
    )


@api_bp.get('/raw/<name>')
def raw_script(name):
    return script_response(lookup(name))


@api_bp.get('/scripts')
def list_scripts():
    return jsonify([entry.to_dict() for entry in get_registry().list()])


@api_bp.post('/scripts')
@login_required
def create_script():
    entry = get_registry().create(_json_body())
    return jsonify(entry.to_dict()), 201


@api_bp.get('/scripts/folders')
@login_required
def list_folder():
    root = get_registry().scripts_dir
    rel_path = request.args.get('path', '')
    abs_path = os.path.normpath(os.path.join(root, rel_path))

    if not is_within(abs_path, root):
        return jsonify(error='Invalid path'), 400

    try:
        if not os.path.exists(abs_path):
            os.makedirs(abs_path)
            return jsonify([])
        if not os.path.isdir(abs_path):
            return jsonify(error='Not a directory'), 400
        with os.scandir(abs_path) as it:
            entries = sorted(it, key=lambda e: e.name)
            listing = [{
                'name': e.name,
                'isDirectory': e.is_dir(),
                'path': posixpath.join(rel_path, e.name),
            } for e in entries]
    except OSError as exc:
        logger.error('Error reading directory %s: %s', abs_path, exc)
        raise IOFailure('Failed to read directory') from exc
    return jsonify(listing)


@api_bp.get('/scripts/<name>')
def get_script(name):
    return jsonify(lookup(name).to_dict())


@api_bp.put('/scripts/<name>')
@login_required
def update_script(name):
    entry = get_registry().update(name, _json_body())
    return jsonify(entry.to_dict())


@api_bp.delete('/scripts/<name>')
@login_required
def delete_script(name):
    get_registry().delete(name)
    return jsonify(success=True)


@api_bp.get('/scripts/<name>/content')
def get_script_content(name):
    try:
        content = get_resolver().read(name)
    except (NotFound, EmptyFolder, InvalidType) as exc:
        return jsonify(error=exc.message), 404
    return jsonify(content=content)


@api_bp.put('/scripts/<name>/content')
@login_required
def update_script_content(name):
    content = _json_body().get('content')
    if not isinstance(content, str) or not content:
        raise InvalidInput('Content is required')
    get_resolver().update_content(name, content)
    return jsonify(success=True)
