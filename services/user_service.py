"""
services/user_service.py
------------------------
Keeps the users table in step with the identities seen on incoming events.
"""

import asyncio
from typing import Optional

from config import ADMIN_USER_IDS
from models.user import User
from repositories.user_repo import UserRepository
from security.auth import is_admin
from utils.errors import InternalError
from utils.logger import get_logger

logger = get_logger(__name__)


class UserService:
    """Registration and soft deactivation of users."""

    def __init__(self, repo: Optional[UserRepository] = None, admin_ids=None):
        self.repo = repo or UserRepository()
        self.admin_ids = ADMIN_USER_IDS if admin_ids is None else admin_ids

    def from_telegram(self, tg_user) -> User:
        """Build an unsaved User from a telegram.User (or anything shaped like it)."""
        return User(
            telegram_id=tg_user.id,
            username=getattr(tg_user, "username", None),
            first_name=getattr(tg_user, "first_name", None),
            last_name=getattr(tg_user, "last_name", None),
            is_admin=is_admin(tg_user.id, self.admin_ids),
        )

    async def register(self, tg_user) -> User:
        """
        Upsert the sender of an event and return the stored record.

        Raises:
            InternalError: The database write failed.
        """
        user = self.from_telegram(tg_user)
        try:
            return await asyncio.to_thread(self.repo.upsert, user)
        except Exception as e:
            raise InternalError(f"could not register user {user.telegram_id}") from e

    async def get(self, telegram_id: int) -> Optional[User]:
        return await asyncio.to_thread(self.repo.get_by_telegram_id, telegram_id)

    async def deactivate(self, telegram_id: int) -> bool:
        return await asyncio.to_thread(self.repo.set_active, telegram_id, False)
