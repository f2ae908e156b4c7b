from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta, timezone
from typing import List, Optional

TYPE_LOCAL = 'local'
TYPE_REDIRECT = 'redirect'
SCRIPT_TYPES = (TYPE_LOCAL, TYPE_REDIRECT)

MODE_MANAGED = 'managed'
MODE_UNMANAGED = 'unmanaged'
SCRIPT_MODES = (MODE_MANAGED, MODE_UNMANAGED)

DEFAULT_ICON = '📜'

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S.%fZ'

# attribute name -> JSON key
JSON_KEYS = {
    'name': 'name',
    'description': 'description',
    'icon': 'icon',
    'type': 'type',
    'redirect_url': 'redirectUrl',
    'mode': 'mode',
    'script_path': 'scriptPath',
    'folder_path': 'folderPath',
    'created_at': 'createdAt',
    'updated_at': 'updatedAt',
}


def utc_timestamp(moment=None):
    moment = moment or datetime.now(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value):
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None


def next_timestamp(previous=None):
    """Current time, nudged forward so it sorts strictly after ``previous``."""
    now = datetime.now(timezone.utc)
    before = parse_timestamp(previous) if previous else None
    if before is not None and now <= before:
        now = before + timedelta(microseconds=1)
    return utc_timestamp(now)


@dataclass
class ScriptEntry:
    name: str
    description: str = ''
    icon: str = DEFAULT_ICON
    type: str = TYPE_LOCAL
    redirect_url: Optional[str] = None
    mode: Optional[str] = None
    script_path: Optional[str] = None
    folder_path: Optional[str] = None
    created_at: str = ''
    updated_at: str = ''

    @property
    def is_local(self):
        return self.type == TYPE_LOCAL

    @property
    def is_redirect(self):
        return self.type == TYPE_REDIRECT

    @property
    def is_managed(self):
        return self.is_local and (self.mode or MODE_MANAGED) == MODE_MANAGED

    @property
    def is_unmanaged(self):
        return self.is_local and self.mode == MODE_UNMANAGED

    def to_dict(self):
        data = {}
        for attr, key in JSON_KEYS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            data[key] = value
        return data

    @classmethod
    def from_dict(cls, data):
        kwargs = {}
        for attr, key in JSON_KEYS.items():
            if key in data and data[key] is not None:
                kwargs[attr] = data[key]
        if 'name' not in kwargs:
            kwargs['name'] = ''
        return cls(**kwargs)


@dataclass
class ScriptPatch:
    """Partial update of a ScriptEntry; ``None`` means leave as is."""

    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    type: Optional[str] = None
    redirect_url: Optional[str] = None
    mode: Optional[str] = None
    script_path: Optional[str] = None
    folder_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        kwargs = {}
        for f in fields(cls):
            key = JSON_KEYS[f.name]
            if data.get(key) is not None:
                kwargs[f.name] = data[key]
        return cls(**kwargs)


def apply_patch(entry, patch):
    changes = {f.name: getattr(patch, f.name) for f in fields(patch)}
    merged = {f.name: getattr(entry, f.name) for f in fields(entry)}
    merged.update({k: v for k, v in changes.items() if v is not None})
    return ScriptEntry(**merged)


@dataclass
class AdminCredentials:
    username: str
    password_hash: str

    def to_dict(self):
        return {'username': self.username, 'passwordHash': self.password_hash}

    @classmethod
    def from_dict(cls, data):
        return cls(
            username=data.get('username', ''),
            password_hash=data.get('passwordHash', ''),
        )


@dataclass
class Config:
    admin: AdminCredentials
    scripts: List[ScriptEntry] = field(default_factory=list)

    def find(self, name):
        for index, entry in enumerate(self.scripts):
            if entry.name == name:
                return index
        return -1

    def to_dict(self):
        return {
            'admin': self.admin.to_dict(),
            'scripts': [entry.to_dict() for entry in self.scripts],
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            admin=AdminCredentials.from_dict(data.get('admin') or {}),
            scripts=[ScriptEntry.from_dict(item) for item in data.get('scripts') or []],
        )
