"""
models/server.py
----------------
Domain models for monitored servers and the user <-> server relation.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

ROLE_OWNER = "owner"


@dataclass
class Server:
    """
    A monitored target, identified by the opaque key the user typed.

    Attributes:
        server_key: External key understood by the monitoring API.
        name: Display name; defaults to the key until renamed.
        created_at: When the server row was created.
        updated_at: Last rename.
    """
    server_key: str
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.name:
            self.name = self.server_key


@dataclass
class UserServer:
    """
    A server as seen by one user: the server plus the relation fields.

    Attributes:
        user_id: Database ID of the user.
        server: The related server.
        role: Free-form role text; the bot only writes "owner".
        added_at: When the relation was created; listings sort on this.
    """
    user_id: int
    server: Server
    role: str = ROLE_OWNER
    added_at: Optional[datetime] = None

    @property
    def server_key(self) -> str:
        return self.server.server_key

    @property
    def name(self) -> str:
        return self.server.name

    def label(self) -> str:
        """Short label used on buttons and in lists."""
        if self.name != self.server_key:
            return f"{self.name} ({self.server_key})"
        return self.server_key

    def __str__(self) -> str:
        added = self.added_at.strftime("%d.%m.%Y %H:%M") if self.added_at else "-"
        return f"{self.label()} | {self.role} | added {added}"
