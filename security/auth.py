"""
security/auth.py
-----------------
Per-user allow-listing and the admin check.

Behavior:
    - If ALLOWED_USER_IDS is empty, ALL users are allowed (dev mode).
    - If the list is set, only those users can use the bot.
    - Admins are the users listed in ADMIN_USER_IDS.
"""

from typing import Iterable, Optional

from config import ADMIN_USER_IDS, ALLOWED_USER_IDS
from utils.logger import get_logger

logger = get_logger(__name__)

ACCESS_DENIED_TEXT = "⛔ Sorry, this bot is private and not available for public use."


def is_allowed(user_id: int, allowed_ids: Optional[Iterable[int]] = None) -> bool:
    """
    Check a user against the allow-list.

    Args:
        user_id: Telegram user ID.
        allowed_ids: Override for the configured allow-list.
    """
    allowed = ALLOWED_USER_IDS if allowed_ids is None else list(allowed_ids)
    if not allowed:
        return True
    if user_id in allowed:
        return True
    logger.warning(f"🚫 Unauthorized access attempt: user_id={user_id}")
    return False


def is_admin(user_id: int, admin_ids: Optional[Iterable[int]] = None) -> bool:
    """Return True if the user is configured as an administrator."""
    admins = ADMIN_USER_IDS if admin_ids is None else list(admin_ids)
    return user_id in admins
