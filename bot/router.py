"""
bot/router.py
-------------
Maps a command name to its registered handler.

One `CommandRouter` is built at startup and handed to the dispatcher; there
is no module-level command table. Registration is last-wins: registering a
name twice replaces the earlier descriptor (a warning is logged).

Routing rules:
    - Unknown name   -> "unknown command" reply, no handler runs.
    - Permission     -> predicates checked in order; the first failure
                        replies "permission denied" and stops.
    - Handler error  -> logged with command and caller, user gets a generic
                        failure message. Internal details never leak.
"""

from typing import Optional, Sequence

from bot.outcome import Outcome
from models.command import PERMISSION_ADMIN, CommandDescriptor, RequestContext
from models.user import User
from utils.errors import GENERIC_FAILURE
from utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN_COMMAND_TEXT = "❓ Unknown command: /{name}\n\nUse /help to see the available commands."
PERMISSION_DENIED_TEXT = "⛔ This command requires administrator rights."


def _check_permission(permission: str, caller: User) -> bool:
    if permission == PERMISSION_ADMIN:
        return bool(caller.is_admin)
    return False


class CommandRouter:
    """Registry and dispatcher for slash commands."""

    def __init__(self, transport):
        self.transport = transport
        self._commands: dict[str, CommandDescriptor] = {}

    def register(self, descriptor: CommandDescriptor) -> None:
        """Insert or replace the descriptor stored under its name."""
        if descriptor.name in self._commands:
            logger.warning(f"Command /{descriptor.name} registered twice; keeping the latest.")
        self._commands[descriptor.name] = descriptor
        logger.debug(f"Command /{descriptor.name} registered.")

    def get(self, name: str) -> Optional[CommandDescriptor]:
        """Descriptor registered under ``name``, or None."""
        return self._commands.get(name)

    def descriptors(self) -> list[CommandDescriptor]:
        """Registered commands in registration order."""
        return list(self._commands.values())

    async def route(
        self,
        name: str,
        args: Sequence[str],
        caller: User,
        chat_id: Optional[int] = None,
    ) -> Outcome:
        """
        Run the handler registered under ``name`` for ``caller``.

        Args:
            name: Command name without the leading slash.
            args: Positional arguments that followed the command.
            caller: Resolved user issuing the command.
            chat_id: Chat to reply in; defaults to the caller's private chat.

        Returns:
            The routing outcome.
        """
        chat_id = caller.telegram_id if chat_id is None else chat_id
        descriptor = self.get(name)

        if descriptor is None:
            logger.info(f"Unknown command /{name} from user {caller.telegram_id}")
            await self.transport.send_message(chat_id, UNKNOWN_COMMAND_TEXT.format(name=name))
            return Outcome.UNKNOWN_COMMAND

        for permission in descriptor.permissions:
            if not _check_permission(permission, caller):
                logger.warning(
                    f"Permission '{permission}' denied for /{name}, user {caller.telegram_id}"
                )
                await self.transport.send_message(chat_id, PERMISSION_DENIED_TEXT)
                return Outcome.PERMISSION_DENIED

        ctx = RequestContext(
            user=caller,
            chat_id=chat_id,
            transport=self.transport,
            args=tuple(args),
            command=name,
        )
        try:
            await descriptor.handler(ctx)
        except Exception as e:
            logger.error(
                f"Command /{name} failed for user {caller.telegram_id}: {e}",
                exc_info=True,
            )
            try:
                await self.transport.send_message(chat_id, GENERIC_FAILURE)
            except Exception as send_error:
                logger.error(f"Failed to report /{name} failure to chat {chat_id}: {send_error}")
            return Outcome.FAILED

        return Outcome.HANDLED
