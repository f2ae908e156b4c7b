import json
import os

import pytest

from pipeshell.errors import IOFailure
from pipeshell.models import ScriptEntry
from pipeshell.store import atomic_write, is_within


def test_load_initializes_default_config(store):
    config = store.load()
    assert config.admin.username == 'admin'
    assert config.scripts == []
    with open(store.path, encoding='utf-8') as fh:
        data = json.load(fh)
    assert data == {'admin': {'username': 'admin', 'passwordHash': 'not-a-hash'}, 'scripts': []}


def test_transaction_persists_changes(store):
    with store.transaction() as config:
        config.scripts.append(ScriptEntry(name='one', description='first'))
    assert [entry.name for entry in store.load().scripts] == ['one']


def test_transaction_discards_changes_on_error(store):
    store.load()
    with pytest.raises(RuntimeError):
        with store.transaction() as config:
            config.scripts.append(ScriptEntry(name='lost'))
            raise RuntimeError('boom')
    assert store.load().scripts == []


def test_last_writer_wins(store):
    first = store.load()
    second = store.load()
    first.scripts.append(ScriptEntry(name='first'))
    second.scripts.append(ScriptEntry(name='second'))
    store.save(first)
    store.save(second)
    assert [entry.name for entry in store.load().scripts] == ['second']


def test_corrupt_config_is_reported(store):
    os.makedirs(os.path.dirname(store.path), exist_ok=True)
    with open(store.path, 'w', encoding='utf-8') as fh:
        fh.write('{not json')
    with pytest.raises(IOFailure, match='not valid JSON'):
        store.load()


def test_atomic_write_sets_mode_and_leaves_no_temp_files(tmp_path):
    target = tmp_path / 'nested' / 'run.sh'
    atomic_write(str(target), 'echo hi\n', mode=0o755)
    atomic_write(str(target), 'echo bye\n', mode=0o755)
    assert target.read_text() == 'echo bye\n'
    assert os.stat(target).st_mode & 0o777 == 0o755
    assert os.listdir(target.parent) == ['run.sh']


def test_is_within(tmp_path):
    root = tmp_path / 'root'
    root.mkdir()
    assert is_within(str(root / 'a' / 'b'), str(root))
    assert is_within(str(root), str(root))
    assert not is_within(str(tmp_path / 'rootless'), str(root))
    assert not is_within(str(root / '..' / 'other'), str(root))
