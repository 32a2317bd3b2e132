"""
repositories/server_repo.py
----------------------------
Data access layer for servers and the user <-> server relation.
"""

from typing import Optional

from db.connection import transaction
from models.server import ROLE_OWNER, Server, UserServer
from utils.logger import get_logger

logger = get_logger(__name__)

_SELECT_USER_SERVER = """
    SELECT us.user_id, s.server_key, s.name, s.created_at, s.updated_at, us.role, us.added_at
    FROM user_servers us
    JOIN servers s ON s.server_key = us.server_key
"""


class ServerRepository:
    """Repository for the servers and user_servers tables."""

    def add_user_server(self, user_id: int, server_key: str, role: str = ROLE_OWNER) -> UserServer:
        """
        Attach a server to a user.

        The server row is created on first use (insert-or-ignore) and the
        relation is inserted in the same transaction, so a relation never
        points at a missing server. Re-adding an existing pair is a no-op
        and returns the stored relation unchanged.

        Args:
            user_id: Database ID of the user.
            server_key: Key exactly as the user typed it.
            role: Relation role.

        Returns:
            The stored UserServer.
        """
        server_sql = """
            INSERT INTO servers (server_key, name)
            VALUES (%s, %s)
            ON CONFLICT (server_key) DO NOTHING;
        """
        relation_sql = """
            INSERT INTO user_servers (user_id, server_key, role)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, server_key) DO NOTHING;
        """
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(server_sql, (server_key, server_key))
                cur.execute(relation_sql, (user_id, server_key, role))
                created = cur.rowcount > 0
                cur.execute(
                    _SELECT_USER_SERVER + " WHERE us.user_id = %s AND us.server_key = %s;",
                    (user_id, server_key),
                )
                row = cur.fetchone()
            if created:
                logger.info(f"Server {server_key} attached to user {user_id} as {role}")
            return self._row_to_user_server(row)
        except Exception as e:
            logger.error(f"Failed to attach server {server_key} to user {user_id}: {e}")
            raise

    def list_user_servers(self, user_id: int) -> list[UserServer]:
        """
        All servers of a user, most recently added first.
        """
        sql = _SELECT_USER_SERVER + " WHERE us.user_id = %s ORDER BY us.added_at DESC, us.id DESC;"
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(sql, (user_id,))
            rows = cur.fetchall()
        return [self._row_to_user_server(r) for r in rows]

    def get_user_server(self, user_id: int, server_key: str) -> Optional[UserServer]:
        sql = _SELECT_USER_SERVER + " WHERE us.user_id = %s AND us.server_key = %s;"
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(sql, (user_id, server_key))
            row = cur.fetchone()
        return self._row_to_user_server(row) if row else None

    def remove_user_server(self, user_id: int, server_key: str) -> bool:
        """
        Detach a server from a user. The server row itself is kept.

        Returns:
            True if a relation was deleted.
        """
        sql = "DELETE FROM user_servers WHERE user_id = %s AND server_key = %s;"
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(sql, (user_id, server_key))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Server {server_key} detached from user {user_id}")
        return deleted

    def rename_server(self, server_key: str, name: str) -> bool:
        """
        Set the display name of a server.

        Returns:
            True if the server exists and was updated.
        """
        sql = "UPDATE servers SET name = %s, updated_at = NOW() WHERE server_key = %s;"
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(sql, (name, server_key))
            return cur.rowcount > 0

    @staticmethod
    def _row_to_user_server(row) -> UserServer:
        return UserServer(
            user_id=row[0],
            server=Server(
                server_key=row[1],
                name=row[2],
                created_at=row[3],
                updated_at=row[4],
            ),
            role=row[5],
            added_at=row[6],
        )
