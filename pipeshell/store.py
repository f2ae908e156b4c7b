import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager

from .errors import IOFailure
from .models import Config

logger = logging.getLogger(__name__)


def atomic_write(path, text, mode=None):
    """Replace ``path`` with ``text`` via a sibling temp file and a rename."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.tmp-')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as fh:
            fh.write(text)
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise


class ConfigStore:
    """The JSON document holding the admin credentials and the registry.

    Every read-modify-write goes through :meth:`transaction`, which holds a
    process-wide lock, so concurrent requests are applied one after another.
    """

    def __init__(self, path, default_admin):
        self.path = path
        self._default_admin = default_admin
        self._lock = threading.RLock()

    def load(self):
        with self._lock:
            if not os.path.exists(self.path):
                config = Config(admin=self._default_admin())
                self._write(config)
                logger.info('Initialized config at %s', self.path)
                return config
            try:
                with open(self.path, encoding='utf-8') as fh:
                    data = json.load(fh)
            except ValueError as exc:
                raise IOFailure(f'Config file {self.path} is not valid JSON: {exc}') from exc
            except OSError as exc:
                raise IOFailure(f'Could not read config file {self.path}: {exc}') from exc
            return Config.from_dict(data)

    def save(self, config):
        with self._lock:
            self._write(config)

    @contextmanager
    def transaction(self):
        with self._lock:
            config = self.load()
            yield config
            self._write(config)

    def _write(self, config):
        text = json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + '\n'
        try:
            atomic_write(self.path, text)
        except OSError as exc:
            raise IOFailure(f'Could not write config file {self.path}: {exc}') from exc


def is_within(path, root):
    path = os.path.realpath(path)
    root = os.path.realpath(root)
    return os.path.commonpath([path, root]) == root
