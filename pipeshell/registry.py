import logging
import os
import shutil
from datetime import datetime

from .errors import Conflict, InvalidInput, InvalidName, IOFailure, NotFound
from .models import (
    DEFAULT_ICON, JSON_KEYS, MODE_MANAGED, SCRIPT_MODES, SCRIPT_TYPES, TYPE_LOCAL,
    ScriptEntry, ScriptPatch, apply_patch, next_timestamp,
)
from .names import is_reserved, sanitize_name, validate_name
from .store import atomic_write, is_within

logger = logging.getLogger(__name__)

SCRIPT_FILE_MODE = 0o755

TEXT_FIELDS = ('description', 'icon', 'redirect_url', 'script_path', 'folder_path')


def default_script(name, description):
    # a newline in the description would turn the rest of it into shell
    summary = ' '.join(description.splitlines())
    return '\n'.join([
        '#!/bin/bash',
        '',
        f'# {summary}',
        f'# Generated on {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}',
        '',
        f'echo "Hello from {name} script!"',
        'echo "Replace this content with your actual script."',
        '',
    ])


def resolve_folder(scripts_dir, folder_path):
    if os.path.isabs(folder_path):
        return folder_path
    return os.path.join(scripts_dir, folder_path)


class ScriptRegistry:
    def __init__(self, store, scripts_dir):
        self.store = store
        self.scripts_dir = os.path.abspath(scripts_dir)
        os.makedirs(self.scripts_dir, exist_ok=True)

    def list(self):
        return self.store.load().scripts

    def get(self, name):
        config = self.store.load()
        index = config.find(name)
        return config.scripts[index] if index != -1 else None

    def folder_for(self, entry):
        return resolve_folder(self.scripts_dir, entry.folder_path or '')

    def create(self, draft):
        raw_name = draft.get('name')
        description = draft.get('description')
        if not isinstance(raw_name, str) or not raw_name.strip() \
                or not isinstance(description, str) or not description.strip():
            raise InvalidInput('Name and description are required')

        if is_reserved(raw_name.strip()):
            raise InvalidName(f'Script name "{raw_name.strip()}" is reserved')

        entry = ScriptEntry.from_dict(draft)
        entry.name = validate_name(sanitize_name(raw_name))
        entry.type = entry.type or TYPE_LOCAL
        self._check_locator(entry)
        entry.icon = entry.icon or DEFAULT_ICON

        with self.store.transaction() as config:
            if config.find(entry.name) != -1:
                raise Conflict(f'Script "{entry.name}" already exists')
            entry.created_at = entry.updated_at = next_timestamp()
            if entry.is_managed and not entry.script_path:
                entry.script_path = self._materialize(entry, config.scripts)
            config.scripts.append(entry)

        logger.info('Created %s script "%s"', entry.type, entry.name)
        return entry

    def update(self, name, patch):
        if isinstance(patch, dict):
            patch = ScriptPatch.from_dict(patch)
        if patch.name is not None and patch.name != name:
            raise InvalidInput('Script names cannot be changed')

        with self.store.transaction() as config:
            index = config.find(name)
            if index == -1:
                raise NotFound(f'Script "{name}" not found')
            current = config.scripts[index]
            updated = apply_patch(current, patch)
            self._check_locator(updated)
            if updated.is_managed and not updated.script_path:
                others = config.scripts[:index] + config.scripts[index + 1:]
                updated.script_path = self._materialize(updated, others)
            updated.updated_at = next_timestamp(current.updated_at)
            config.scripts[index] = updated

        logger.info('Updated script "%s"', name)
        return updated

    def delete(self, name):
        with self.store.transaction() as config:
            index = config.find(name)
            if index == -1:
                raise NotFound(f'Script "{name}" not found')
            entry = config.scripts.pop(index)
            remaining = list(config.scripts)

        if entry.is_managed and entry.script_path:
            self._remove_script_dir(entry, remaining)
        logger.info('Deleted script "%s"', name)

    def _check_locator(self, entry):
        for attr in TEXT_FIELDS:
            value = getattr(entry, attr)
            if value is not None and not isinstance(value, str):
                raise InvalidInput(f'"{JSON_KEYS[attr]}" must be a string')
        if entry.type not in SCRIPT_TYPES:
            raise InvalidInput(f'Unknown script type "{entry.type}"')
        if entry.is_local:
            entry.mode = entry.mode or MODE_MANAGED
            if entry.mode not in SCRIPT_MODES:
                raise InvalidInput(f'Unknown script mode "{entry.mode}"')
            if entry.is_unmanaged and not entry.folder_path:
                raise InvalidInput('Folder path is required for unmanaged scripts')
        elif not entry.redirect_url:
            raise InvalidInput('Redirect URL is required for redirect type scripts')

    def _unmanaged_folders_within(self, directory, entries):
        return [other.name for other in entries
                if other.is_unmanaged and other.folder_path
                and is_within(self.folder_for(other), directory)]

    def _materialize(self, entry, others):
        script_dir = os.path.join(self.scripts_dir, entry.name)
        script_file = os.path.join(script_dir, f'{entry.name}.sh')
        if os.path.exists(script_dir):
            raise Conflict(f'Directory {script_dir} already exists')
        claimed = self._unmanaged_folders_within(script_dir, others)
        if claimed:
            raise Conflict(f'Directory {script_dir} is used by unmanaged script "{claimed[0]}"')
        try:
            os.makedirs(script_dir)
            atomic_write(script_file, default_script(entry.name, entry.description),
                         mode=SCRIPT_FILE_MODE)
        except OSError as exc:
            raise IOFailure(f'Could not create script file {script_file}: {exc}') from exc
        return script_file

    def _remove_script_dir(self, entry, remaining):
        script_dir = os.path.dirname(os.path.abspath(entry.script_path))
        if os.path.realpath(script_dir) == os.path.realpath(self.scripts_dir) \
                or not is_within(script_dir, self.scripts_dir):
            logger.warning('Not removing %s for "%s": outside the scripts directory',
                           script_dir, entry.name)
            return
        claimed = self._unmanaged_folders_within(script_dir, remaining)
        if claimed:
            logger.warning('Not removing %s for "%s": it holds the folder of unmanaged script "%s"',
                           script_dir, entry.name, claimed[0])
            return
        try:
            shutil.rmtree(script_dir)
        except OSError as exc:
            logger.error('Error deleting script files for "%s": %s', entry.name, exc)
