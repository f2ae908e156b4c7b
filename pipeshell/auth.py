import logging
from functools import wraps

import bcrypt
from flask import Blueprint, jsonify, request, session

from .context import get_store
from .errors import Unauthorized
from .models import next_timestamp

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def hash_password(password):
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def check_password(password, password_hash):
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        logger.error('Stored admin password hash is not a valid bcrypt hash')
        return False


def verify(admin, username, password):
    if username != admin.username:
        return False
    return check_password(password, admin.password_hash)


def current_user():
    username = session.get('admin')
    if not username or username != get_store().load().admin.username:
        return None
    return username


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_user() is None:
            raise Unauthorized('Unauthorized')
        return f(*args, **kwargs)
    return decorated_function


def _credentials():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    username = data.get('username')
    password = data.get('password')
    if not isinstance(username, str) or not isinstance(password, str):
        return None, None
    return username, password


@auth_bp.post('/login')
def login():
    username, password = _credentials()
    if username and password and verify(get_store().load().admin, username, password):
        session.clear()
        session.permanent = True
        session['admin'] = username
        session['issued_at'] = next_timestamp()
        logger.info('Admin "%s" logged in from %s', username, request.remote_addr)
        return jsonify(success=True, username=username)
    logger.warning('Failed login attempt from %s', request.remote_addr)
    return jsonify(error='Invalid credentials'), 401


@auth_bp.post('/logout')
def logout():
    session.clear()
    return jsonify(success=True)


@auth_bp.get('/session')
def current_session():
    username = current_user()
    if username is None:
        raise Unauthorized('Unauthorized')
    return jsonify(username=username, issuedAt=session.get('issued_at'))
