import re

from .errors import InvalidName

RESERVED_NAMES = frozenset({
    'admin',
    'login',
    'api',
    'health',
    '_next',
    'favicon.ico',
    'robots.txt',
    'sitemap.xml',
})

NAME_PATTERN = re.compile(r'^[a-z0-9_-]{2,50}$')


def sanitize_name(raw):
    """Lowercase ``raw`` and turn whitespace runs and dots into underscores.

    Hyphens are left alone, so a name that already matches
    ``NAME_PATTERN`` comes back unchanged.
    """
    name = raw.strip().lower()
    name = re.sub(r'\s+', '_', name)
    return name.replace('.', '_')


def is_reserved(name):
    return name.lower() in RESERVED_NAMES


def validate_name(name):
    if is_reserved(name):
        raise InvalidName(f'Script name "{name}" is reserved')
    if not NAME_PATTERN.match(name):
        raise InvalidName(
            f'Script name "{name}" must be 2-50 characters of a-z, 0-9, "_" or "-"'
        )
    return name
