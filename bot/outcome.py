"""
bot/outcome.py
--------------
Result of dispatching one event. Returned by the router and the dispatcher
so callers and tests can tell what happened without inspecting replies.
"""

from enum import Enum


class Outcome(str, Enum):
    IGNORED = "ignored"
    HANDLED = "handled"
    FREE_TEXT = "free_text"
    UNKNOWN_COMMAND = "unknown_command"
    PERMISSION_DENIED = "permission_denied"
    FAILED = "failed"
    UNKNOWN_ACTION = "unknown_action"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
