"""
repositories/user_repo.py
--------------------------
Data access layer for user records.
"""

from typing import Optional

from db.connection import transaction
from models.user import User
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, telegram_id, username, first_name, last_name, is_admin, is_active, created_at, last_seen"


class UserRepository:
    """Repository for CRUD operations on the users table."""

    def upsert(self, user: User) -> User:
        """
        Insert a user if they don't exist, otherwise refresh name fields,
        the admin flag and last_seen.
        Uses PostgreSQL's ON CONFLICT (upsert) for atomicity.

        ``is_active`` is only written on insert, so a deactivated user stays
        deactivated no matter how many events arrive.

        Args:
            user: User carrying the identity fields from the chat platform.

        Returns:
            The stored User with database ID and timestamps populated.
        """
        sql = f"""
            INSERT INTO users (telegram_id, username, first_name, last_name, is_admin)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (telegram_id) DO UPDATE SET
                username   = EXCLUDED.username,
                first_name = EXCLUDED.first_name,
                last_name  = EXCLUDED.last_name,
                is_admin   = EXCLUDED.is_admin,
                last_seen  = NOW()
            RETURNING {_COLUMNS};
        """
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, (
                    user.telegram_id, user.username, user.first_name,
                    user.last_name, user.is_admin,
                ))
                row = cur.fetchone()
            return self._row_to_user(row)
        except Exception as e:
            logger.error(f"Failed to upsert user {user.telegram_id}: {e}")
            raise

    def get_by_telegram_id(self, telegram_id: int) -> Optional[User]:
        """
        Fetch a user by their Telegram ID.

        Returns:
            User or None.
        """
        sql = f"SELECT {_COLUMNS} FROM users WHERE telegram_id = %s;"
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(sql, (telegram_id,))
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def set_active(self, telegram_id: int, active: bool) -> bool:
        """
        Flip the soft activation flag.

        Returns:
            True if a user row was updated.
        """
        sql = "UPDATE users SET is_active = %s WHERE telegram_id = %s;"
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(sql, (active, telegram_id))
            updated = cur.rowcount > 0
        if updated:
            logger.info(f"User {telegram_id} is_active set to {active}")
        return updated

    @staticmethod
    def _row_to_user(row) -> User:
        return User(
            id=row[0],
            telegram_id=row[1],
            username=row[2],
            first_name=row[3],
            last_name=row[4],
            is_admin=row[5],
            is_active=row[6],
            created_at=row[7],
            last_seen=row[8],
        )
