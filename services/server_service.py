"""
services/server_service.py
--------------------------
Business logic for the servers a user monitors.
"""

import asyncio
from typing import Optional

from models.server import ROLE_OWNER, UserServer
from models.user import User
from repositories.server_repo import ServerRepository
from services.source_reconciler import ReconcileResult, SourceReconciler
from utils.errors import InternalError, NotFoundError
from utils.logger import get_logger
from utils.validators import validate_server_key, validate_server_name

logger = get_logger(__name__)


def match_server(servers: list[UserServer], ref: str) -> Optional[UserServer]:
    """Pick the server whose key equals ``ref``, else the first whose name matches case-insensitively."""
    ref = (ref or "").strip()
    if not ref:
        return None
    for server in servers:
        if server.server_key == ref:
            return server
    lowered = ref.lower()
    for server in servers:
        if server.name.lower() == lowered:
            return server
    return None


class ServerService:
    """
    Handles everything about a user's server list.

    Workflow for adding a server:
        1. Validate the key locally.
        2. Reconcile the bot's source tag upstream.
        3. Persist the relation with the key exactly as typed.
    """

    def __init__(self, reconciler: SourceReconciler, repo: Optional[ServerRepository] = None):
        self.reconciler = reconciler
        self.repo = repo or ServerRepository()

    @staticmethod
    def _require_id(user: User) -> int:
        if user.id is None:
            raise InternalError(f"user {user.telegram_id} is not persisted")
        return user.id

    async def add_server(self, user: User, server_key: str) -> tuple[UserServer, ReconcileResult]:
        """
        Attach a server to ``user`` after confirming the upstream registration.

        Raises:
            ValidationError, NotFoundError, ExternalServiceError: From reconciliation.
            InternalError: The relation could not be stored.
        """
        user_id = self._require_id(user)
        server_key = validate_server_key(server_key)
        result = await self.reconciler.ensure_registered(server_key)
        try:
            relation = await asyncio.to_thread(self.repo.add_user_server, user_id, server_key, ROLE_OWNER)
        except Exception as e:
            raise InternalError(f"could not store server {server_key} for user {user.telegram_id}") from e
        logger.info(f"User {user.telegram_id} added server {server_key} ({result.value})")
        return relation, result

    async def list_servers(self, user: User) -> list[UserServer]:
        """Servers of ``user``, most recently added first."""
        user_id = self._require_id(user)
        try:
            return await asyncio.to_thread(self.repo.list_user_servers, user_id)
        except Exception as e:
            raise InternalError(f"could not list servers for user {user.telegram_id}") from e

    async def find_server(self, user: User, ref: str) -> Optional[UserServer]:
        """Match ``ref`` against the user's servers by key first, then by name (case-insensitive)."""
        if not (ref or "").strip():
            return None
        return match_server(await self.list_servers(user), ref)

    async def remove_server(self, user: User, server_key: str) -> None:
        """
        Raises:
            NotFoundError: The user has no such server.
        """
        user_id = self._require_id(user)
        server_key = validate_server_key(server_key)
        removed = await asyncio.to_thread(self.repo.remove_user_server, user_id, server_key)
        if not removed:
            raise NotFoundError(f"server '{server_key}' is not in your list", {"server_key": server_key})
        logger.info(f"User {user.telegram_id} removed server {server_key}")

    async def rename_server(self, user: User, server_key: str, name: str) -> UserServer:
        """
        Raises:
            ValidationError: Bad key or name.
            NotFoundError: The user has no such server.
        """
        user_id = self._require_id(user)
        server_key = validate_server_key(server_key)
        name = validate_server_name(name)
        relation = await asyncio.to_thread(self.repo.get_user_server, user_id, server_key)
        if relation is None:
            raise NotFoundError(f"server '{server_key}' is not in your list", {"server_key": server_key})
        if not await asyncio.to_thread(self.repo.rename_server, server_key, name):
            raise InternalError(f"rename of {server_key} affected no rows")
        relation.server.name = name
        logger.info(f"User {user.telegram_id} renamed {server_key} to {name!r}")
        return relation
