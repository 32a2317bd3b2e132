"""
handlers/server_handler.py
---------------------------
Handles the user's server list: /servers, /add, /rename, /remove and the
inline buttons that go with them.
Delegates all logic to ServerService.
"""

from bot.callback_data import (
    RemoveServer,
    RenameServer,
    ShowRemoveServers,
    ShowRenameServers,
    ShowServers,
)
from models.command import CommandDescriptor, Keyboard, RequestContext
from services.metrics_formatter import format_servers_list
from services.server_service import ServerService
from services.source_reconciler import ReconcileResult
from utils.errors import BotError, NotFoundError, ValidationError, user_message
from utils.logger import get_logger
from utils.validators import SERVER_NAME_MAX_LENGTH

logger = get_logger(__name__)

ADD_USAGE = "Usage: /add <server_key>\nExample: /add srv_12313"
RENAME_USAGE = "Usage: /rename <server_key> <new name>\nExample: /rename srv_12313 Web frontend"
REMOVE_USAGE = "Usage: /remove <server_key>\nExample: /remove srv_12313"

INVALID_KEY_TEXT = "⚠️ Invalid server key. It must be between 4 and 100 characters."
INVALID_NAME_TEXT = (
    f"⚠️ Invalid name. Use up to {SERVER_NAME_MAX_LENGTH} characters "
    "without < > \" ' & ;"
)
UPSTREAM_NOT_FOUND_TEXT = (
    "❌ Server {key} was not found by the monitoring service.\n"
    "Check the key and try again."
)
NOT_IN_LIST_TEXT = "❌ Server {key} is not in your list. See /servers."
NO_SERVERS_TEXT = "You have no servers yet.\n\nUse /add <server_key> to add one."


def _back_row() -> list:
    return [("⬅️ Back", ShowServers())]


class ServerHandlers:
    """Commands and callbacks for managing servers."""

    def __init__(self, server_service: ServerService):
        self.servers = server_service

    def commands(self) -> list[CommandDescriptor]:
        return [
            CommandDescriptor("servers", "🖥️ List your servers", self.servers_command),
            CommandDescriptor("add", "➕ Add a server by key", self.add_command),
            CommandDescriptor("rename", "✏️ Rename a server", self.rename_command),
            CommandDescriptor("remove", "🗑️ Remove a server", self.remove_command),
        ]

    def callbacks(self) -> dict:
        return {
            ShowServers: self.show_servers_callback,
            ShowRemoveServers: self.show_remove_callback,
            ShowRenameServers: self.show_rename_callback,
            RemoveServer: self.remove_server_callback,
            RenameServer: self.rename_server_callback,
        }

    async def _list_view(self, ctx: RequestContext) -> tuple[str, Keyboard]:
        servers = await self.servers.list_servers(ctx.user)
        keyboard = []
        if servers:
            keyboard = [[
                ("✏️ Rename", ShowRenameServers()),
                ("🗑️ Remove", ShowRemoveServers()),
            ]]
        return format_servers_list(servers), keyboard

    # ── Commands ──────────────────────────────────────────

    async def servers_command(self, ctx: RequestContext) -> None:
        """Handle /servers - list servers, most recent first."""
        text, keyboard = await self._list_view(ctx)
        await ctx.reply(text, keyboard)

    async def add_command(self, ctx: RequestContext) -> None:
        """Handle /add <key> - register the bot upstream, then save the server."""
        if len(ctx.args) != 1:
            await ctx.reply(ADD_USAGE)
            return

        key = ctx.args[0]
        try:
            relation, result = await self.servers.add_server(ctx.user, key)
        except ValidationError:
            await ctx.reply(INVALID_KEY_TEXT)
            return
        except NotFoundError:
            await ctx.reply(UPSTREAM_NOT_FOUND_TEXT.format(key=key))
            return
        except BotError as e:
            logger.error(f"/add {key} failed for user {ctx.user.telegram_id}: {e}")
            await ctx.reply(user_message(e))
            return

        note = (
            "Monitoring was already enabled for this server."
            if result is ReconcileResult.ALREADY_REGISTERED
            else "Monitoring has been enabled for this server."
        )
        await ctx.reply(
            f"✅ Server {relation.server_key} added.\n{note}\n\n"
            "Try /all to see its metrics."
        )

    async def rename_command(self, ctx: RequestContext) -> None:
        """Handle /rename <key> <new name...>."""
        if len(ctx.args) < 2:
            await ctx.reply(RENAME_USAGE)
            return

        key, name = ctx.args[0], " ".join(ctx.args[1:])
        try:
            relation = await self.servers.rename_server(ctx.user, key, name)
        except ValidationError as e:
            await ctx.reply(INVALID_NAME_TEXT if "name" in e.message else INVALID_KEY_TEXT)
            return
        except NotFoundError:
            await ctx.reply(NOT_IN_LIST_TEXT.format(key=key))
            return
        await ctx.reply(f"✅ Server {relation.server_key} renamed to \"{relation.name}\".")

    async def remove_command(self, ctx: RequestContext) -> None:
        """Handle /remove <key>."""
        if len(ctx.args) != 1:
            await ctx.reply(REMOVE_USAGE)
            return

        key = ctx.args[0]
        try:
            await self.servers.remove_server(ctx.user, key)
        except ValidationError:
            await ctx.reply(INVALID_KEY_TEXT)
            return
        except NotFoundError:
            await ctx.reply(NOT_IN_LIST_TEXT.format(key=key))
            return
        await ctx.reply(f"🗑️ Server {key} removed from your list.")

    # ── Callbacks ─────────────────────────────────────────

    async def show_servers_callback(self, ctx: RequestContext, action: ShowServers) -> None:
        text, keyboard = await self._list_view(ctx)
        await ctx.edit(text, keyboard)

    async def _picker(self, ctx: RequestContext, title: str, make_action) -> None:
        servers = await self.servers.list_servers(ctx.user)
        if not servers:
            await ctx.edit(NO_SERVERS_TEXT)
            return
        keyboard = [[(s.label(), make_action(s.server_key))] for s in servers]
        keyboard.append(_back_row())
        await ctx.edit(title, keyboard)

    async def show_remove_callback(self, ctx: RequestContext, action: ShowRemoveServers) -> None:
        await self._picker(ctx, "🗑️ Choose a server to remove:", RemoveServer)

    async def show_rename_callback(self, ctx: RequestContext, action: ShowRenameServers) -> None:
        await self._picker(ctx, "✏️ Choose a server to rename:", RenameServer)

    async def remove_server_callback(self, ctx: RequestContext, action: RemoveServer) -> None:
        try:
            await self.servers.remove_server(ctx.user, action.key)
        except NotFoundError:
            await ctx.edit(NOT_IN_LIST_TEXT.format(key=action.key), [_back_row()])
            return
        await ctx.edit(f"🗑️ Server {action.key} removed from your list.", [_back_row()])

    async def rename_server_callback(self, ctx: RequestContext, action: RenameServer) -> None:
        await ctx.edit(
            f"✏️ To rename {action.key}, send:\n/rename {action.key} <new name>",
            [_back_row()],
        )
