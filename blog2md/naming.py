"""
File name helpers.

Turns post titles and slugs into names that are safe to use on disk.
"""

import re

ILLEGAL_CHARS = re.compile(r'[/\?<>\\:\*\|"]')
CONTROL_CHARS = re.compile(r'[\x00-\x1f\x80-\x9f]')
RESERVED_NAMES = re.compile(r'^\.+$')
WINDOWS_RESERVED = re.compile(r'^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$', re.IGNORECASE)
WINDOWS_TRAILING = re.compile(r'[\. ]+$')
KNOWN_CHARS = re.compile(r"[\.']")
NON_ALNUM = re.compile(r'[^a-z0-9]', re.IGNORECASE)
MULTIPLE_HYPHENS = re.compile(r'-{2,}')

MAX_NAME_BYTES = 255


def sanitize_filename(name: str) -> str:
    """Remove characters that are not allowed in file names on common platforms."""
    if not name:
        return ''

    name = ILLEGAL_CHARS.sub('', name)
    name = CONTROL_CHARS.sub('', name)
    name = RESERVED_NAMES.sub('', name)
    name = WINDOWS_RESERVED.sub('', name)
    name = WINDOWS_TRAILING.sub('', name)

    # Truncate on a character boundary
    encoded = name.encode('utf-8')
    if len(encoded) > MAX_NAME_BYTES:
        name = encoded[:MAX_NAME_BYTES].decode('utf-8', errors='ignore')

    return name


def file_name_from_title(title: str) -> str:
    """Convert a post title to a lower-case, hyphenated file name.

    "Hello World" -> "hello-world", "Don't panic." -> "dont-panic"
    """
    name = sanitize_filename(title or '')
    name = KNOWN_CHARS.sub('', name)
    name = NON_ALNUM.sub('-', name)
    name = MULTIPLE_HYPHENS.sub('-', name)
    return name.lower()


def quote_escape(value: str) -> str:
    """Double single quotes for a single-quoted YAML scalar."""
    return (value or '').replace("'", "''")
