import logging
import os

from .errors import EmptyFolder, InvalidType, IOFailure, NotFound, Unmanaged
from .models import ScriptPatch
from .registry import SCRIPT_FILE_MODE
from .store import atomic_write

logger = logging.getLogger(__name__)

SCRIPT_SUFFIX = '.sh'


class ContentResolver:
    """Turns registry entries into the script text that gets served."""

    def __init__(self, registry):
        self.registry = registry

    @property
    def scripts_dir(self):
        return self.registry.scripts_dir

    def read(self, name):
        entry = self.registry.get(name)
        if entry is None:
            raise NotFound(f'Script "{name}" not found')
        return self.resolve(entry)

    def resolve(self, entry):
        if not entry.is_local:
            raise InvalidType(f'Script "{entry.name}" is not a local script')
        if entry.is_unmanaged:
            path = self.newest_script(self.folder_for(entry))
        else:
            path = entry.script_path
            if not path:
                raise NotFound(f'Script "{entry.name}" has no content')
        return self._read_file(entry.name, path)

    def folder_for(self, entry):
        return self.registry.folder_for(entry)

    def newest_script(self, folder):
        if not os.path.isdir(folder):
            raise NotFound(f'Folder {folder} does not exist')
        candidates = []
        try:
            with os.scandir(folder) as it:
                for item in it:
                    if item.name.endswith(SCRIPT_SUFFIX) and item.is_file():
                        candidates.append((item.stat().st_mtime_ns, item.name, item.path))
        except OSError as exc:
            raise IOFailure(f'Could not list folder {folder}: {exc}') from exc
        if not candidates:
            raise EmptyFolder(f'No {SCRIPT_SUFFIX} files found in {folder}')
        return max(candidates)[2]

    def update_content(self, name, content):
        entry = self.registry.get(name)
        if entry is None:
            raise NotFound(f'Script "{name}" not found')
        if entry.is_redirect:
            raise InvalidType(f'Script "{name}" is a redirect and has no content')
        if entry.is_unmanaged:
            raise Unmanaged(f'Script "{name}" is unmanaged; edit the files in its folder instead')
        if not entry.script_path:
            raise NotFound(f'Script "{name}" has no content')
        try:
            atomic_write(entry.script_path, content, mode=SCRIPT_FILE_MODE)
        except OSError as exc:
            raise IOFailure(f'Could not write script "{name}": {exc}') from exc
        self.registry.update(name, ScriptPatch())
        logger.info('Updated content of script "%s"', name)

    def _read_file(self, name, path):
        try:
            with open(path, encoding='utf-8') as fh:
                return fh.read()
        except FileNotFoundError as exc:
            raise NotFound(f'Script file for "{name}" not found') from exc
        except OSError as exc:
            raise IOFailure(f'Could not read script "{name}": {exc}') from exc
