"""
models/user.py
--------------
Domain model for chat users.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class User:
    """
    Represents a chat user known to the bot.

    Attributes:
        telegram_id: Platform-assigned numeric ID (identity key).
        username: Optional @handle.
        first_name: Display first name.
        last_name: Display last name.
        is_admin: Whether admin-only commands are allowed.
        is_active: Soft deactivation flag; users are never hard-deleted.
        id: Database primary key (None until persisted).
        created_at: First time the user was seen.
        last_seen: Last time any event from the user was processed.
    """
    telegram_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_admin: bool = False
    is_active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    last_seen: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        if parts:
            return " ".join(parts)
        if self.username:
            return f"@{self.username}"
        return str(self.telegram_id)

    def __str__(self) -> str:
        return f"{self.display_name} ({self.telegram_id})"
