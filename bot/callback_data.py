"""
bot/callback_data.py
--------------------
Typed inline-button payloads.

Telegram hands back the raw ``callback_data`` string of a pressed button.
Instead of matching prefixes at the dispatch boundary, the string is
decoded once into one of the action dataclasses below; anything that does
not decode cleanly is treated as an unknown action.

Wire format:
    show_servers
    show_remove_servers
    show_rename_servers
    remove_server:<key>
    rename_server:<key>
    metric:<kind>:<key>
"""

from dataclasses import dataclass
from typing import Optional, Union

from utils.errors import ValidationError
from utils.validators import validate_server_key

# Telegram rejects callback_data longer than 64 bytes
MAX_CALLBACK_BYTES = 64

METRIC_KINDS = ("cpu", "memory", "disk", "temp", "network", "system", "all")


@dataclass(frozen=True)
class ShowServers:
    pass


@dataclass(frozen=True)
class ShowRemoveServers:
    pass


@dataclass(frozen=True)
class ShowRenameServers:
    pass


@dataclass(frozen=True)
class RemoveServer:
    key: str


@dataclass(frozen=True)
class RenameServer:
    key: str


@dataclass(frozen=True)
class ShowMetric:
    metric: str
    key: str

    def __post_init__(self):
        if self.metric not in METRIC_KINDS:
            raise ValueError(f"Unknown metric kind: {self.metric!r}")


CallbackAction = Union[
    ShowServers, ShowRemoveServers, ShowRenameServers, RemoveServer, RenameServer, ShowMetric
]

_SIMPLE = {
    "show_servers": ShowServers,
    "show_remove_servers": ShowRemoveServers,
    "show_rename_servers": ShowRenameServers,
}
_KEYED = {
    "remove_server": RemoveServer,
    "rename_server": RenameServer,
}
_SIMPLE_TAGS = {cls: tag for tag, cls in _SIMPLE.items()}
_KEYED_TAGS = {cls: tag for tag, cls in _KEYED.items()}


def encode(action: CallbackAction) -> str:
    """
    Serialize an action into a callback_data string.

    Raises:
        ValueError: If the action type is unknown or the result is too long.
    """
    if type(action) in _SIMPLE_TAGS:
        data = _SIMPLE_TAGS[type(action)]
    elif type(action) in _KEYED_TAGS:
        data = f"{_KEYED_TAGS[type(action)]}:{action.key}"
    elif isinstance(action, ShowMetric):
        data = f"metric:{action.metric}:{action.key}"
    else:
        raise ValueError(f"Cannot encode callback action {action!r}")

    if len(data.encode("utf-8")) > MAX_CALLBACK_BYTES:
        raise ValueError(f"callback_data exceeds {MAX_CALLBACK_BYTES} bytes: {data!r}")
    return data


def decode(data: Optional[str]) -> Optional[CallbackAction]:
    """
    Parse a callback_data string.

    Returns:
        The decoded action, or None if the payload is unknown or malformed.
    """
    if not data:
        return None

    if data in _SIMPLE:
        return _SIMPLE[data]()

    tag, sep, rest = data.partition(":")
    if not sep:
        return None

    try:
        if tag in _KEYED:
            return _KEYED[tag](validate_server_key(rest))
        if tag == "metric":
            metric, sep, key = rest.partition(":")
            if not sep:
                return None
            return ShowMetric(metric, validate_server_key(key))
    except (ValidationError, ValueError):
        return None

    return None
