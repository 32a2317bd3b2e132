"""
models/command.py
-----------------
Command descriptors and the request-scoped context handed to handlers.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from models.user import User

PERMISSION_ADMIN = "admin"
KNOWN_PERMISSIONS = frozenset({PERMISSION_ADMIN})

# Rows of (button label, callback action) pairs
Keyboard = list[list[tuple[str, Any]]]


@dataclass
class RequestContext:
    """
    Everything a handler needs to answer one request.

    Attributes:
        user: The resolved caller.
        chat_id: Chat the reply goes to.
        transport: Chat transport used for replies.
        args: Positional command arguments.
        message_id: Message that carried the callback (callbacks only).
        command: Name of the command being served, if any.
    """
    user: User
    chat_id: int
    transport: Any
    args: tuple[str, ...] = ()
    message_id: Optional[int] = None
    command: Optional[str] = None

    async def reply(self, text: str, keyboard: Optional[Keyboard] = None) -> None:
        await self.transport.send_message(self.chat_id, text, keyboard=keyboard)

    async def edit(self, text: str, keyboard: Optional[Keyboard] = None) -> None:
        """Edit the originating message, or send a new one if there is none."""
        if self.message_id is None:
            await self.reply(text, keyboard)
            return
        await self.transport.edit_message(self.chat_id, self.message_id, text, keyboard=keyboard)


CommandHandler = Callable[[RequestContext], Awaitable[None]]


@dataclass(frozen=True)
class CommandDescriptor:
    """
    A routable command.

    Attributes:
        name: Dispatch key, without the leading slash.
        description: Human description shown in the bot menu and /help.
        handler: Coroutine function taking a RequestContext.
        permissions: Predicates checked in order before the handler runs.
        hidden: Keep the command out of the public bot menu.
    """
    name: str
    description: str
    handler: CommandHandler
    permissions: tuple[str, ...] = field(default_factory=tuple)
    hidden: bool = False

    def __post_init__(self):
        if not self.name or self.name.startswith("/") or " " in self.name:
            raise ValueError(f"Invalid command name: {self.name!r}")
        object.__setattr__(self, "permissions", tuple(self.permissions))
        unknown = [p for p in self.permissions if p not in KNOWN_PERMISSIONS]
        if unknown:
            raise ValueError(f"Unknown permission(s) for /{self.name}: {unknown}")

    @property
    def admin_only(self) -> bool:
        return PERMISSION_ADMIN in self.permissions
