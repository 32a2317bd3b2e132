"""
services/source_reconciler.py
-----------------------------
Makes sure the bot is listed as a metrics source on a server.

The upstream API has no "ensure" primitive, so this is check-then-act:
read the source list, write only when the bot's tag is missing. Two
concurrent calls for the same key may both write; the upstream treats the
second add as a no-op.
"""

from enum import Enum

from config import BOT_SOURCE_TAG
from utils.errors import ExternalServiceError, NotFoundError
from utils.logger import get_logger
from utils.validators import validate_server_key

logger = get_logger(__name__)


class ReconcileResult(str, Enum):
    ALREADY_REGISTERED = "already_registered"
    SOURCE_ADDED = "source_added"


class SourceReconciler:
    """
    Args:
        client: Object exposing ``get_server_sources`` and ``add_server_source``
            coroutines (MonitoringClient).
        source_tag: Tag identifying this bot upstream.
    """

    def __init__(self, client, source_tag: str = BOT_SOURCE_TAG):
        self.client = client
        self.source_tag = source_tag

    async def ensure_registered(self, server_key: str) -> ReconcileResult:
        """
        Register the bot's source tag on ``server_key`` unless already present.

        Raises:
            ValidationError: Malformed key; no request is made.
            NotFoundError: The key is unknown upstream.
            ExternalServiceError: Any other upstream failure, including a
                failed add-source call.
        """
        server_key = validate_server_key(server_key)

        sources = await self.client.get_server_sources(server_key)
        if self.source_tag in sources:
            logger.info(f"Source {self.source_tag} already registered on {server_key}")
            return ReconcileResult.ALREADY_REGISTERED

        try:
            await self.client.add_server_source(server_key, self.source_tag)
        except NotFoundError as e:
            # the server vanished between the read and the write
            raise ExternalServiceError(
                "Monitoring API", f"add source failed for {server_key}", status_code=404
            ) from e
        logger.info(f"Source {self.source_tag} added to {server_key} (existing: {sources})")
        return ReconcileResult.SOURCE_ADDED
