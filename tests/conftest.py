import pytest

from pipeshell import create_app
from pipeshell.models import AdminCredentials
from pipeshell.registry import ScriptRegistry
from pipeshell.resolver import ContentResolver
from pipeshell.store import ConfigStore

ADMIN_PASSWORD = 's3cret-pass'


@pytest.fixture
def scripts_dir(tmp_path):
    path = tmp_path / 'scripts'
    path.mkdir()
    return path


@pytest.fixture
def store(tmp_path):
    return ConfigStore(
        str(tmp_path / 'data' / 'config.json'),
        lambda: AdminCredentials(username='admin', password_hash='not-a-hash'),
    )


@pytest.fixture
def registry(store, scripts_dir):
    return ScriptRegistry(store, str(scripts_dir))


@pytest.fixture
def resolver(registry):
    return ContentResolver(registry)


@pytest.fixture
def app(tmp_path, scripts_dir):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'CONFIG_PATH': str(tmp_path / 'data' / 'config.json'),
        'SCRIPTS_DIR': str(scripts_dir),
        'ADMIN_USERNAME': 'admin',
        'ADMIN_PASSWORD': ADMIN_PASSWORD,
    })
    yield app


@pytest.fixture
def app_registry(app):
    return app.extensions['pipeshell'].registry


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    response = client.post('/api/auth/login',
                           json={'username': 'admin', 'password': ADMIN_PASSWORD})
    assert response.status_code == 200
    return client
