"""
utils/validators.py
-------------------
Cheap local checks run before any network or database call.
"""

import re

from utils.errors import ValidationError

SERVER_KEY_MIN_LENGTH = 4
SERVER_KEY_MAX_LENGTH = 100
SERVER_NAME_MAX_LENGTH = 50

_FORBIDDEN_NAME_CHARS = set("<>\"'&;")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def validate_server_key(key: str) -> str:
    """
    Validate a user-supplied server key.

    Args:
        key: The raw key, e.g. ``srv_12313``.

    Returns:
        The key with surrounding whitespace removed.

    Raises:
        ValidationError: If the key is empty, too short or too long.
    """
    key = (key or "").strip()
    if not key:
        raise ValidationError("server key cannot be empty")
    if len(key) < SERVER_KEY_MIN_LENGTH:
        raise ValidationError(
            "server key too short", {"min_length": SERVER_KEY_MIN_LENGTH}
        )
    if len(key) > SERVER_KEY_MAX_LENGTH:
        raise ValidationError(
            "server key too long", {"max_length": SERVER_KEY_MAX_LENGTH}
        )
    return key


def validate_server_name(name: str) -> str:
    """Validate a display name for a server and return it stripped."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("server name cannot be empty")
    if len(name) > SERVER_NAME_MAX_LENGTH:
        raise ValidationError(
            "server name too long", {"max_length": SERVER_NAME_MAX_LENGTH}
        )
    if any(ch in _FORBIDDEN_NAME_CHARS for ch in name):
        raise ValidationError("server name contains forbidden characters")
    return name


def sanitize_input(text: str) -> str:
    """Replace control characters with spaces and trim the result."""
    return _CONTROL_CHARS.sub(" ", text or "").strip()
