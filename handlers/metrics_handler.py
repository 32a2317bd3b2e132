"""
handlers/metrics_handler.py
----------------------------
Handles the metric commands (/cpu, /memory, /disk, /temp, /network,
/system, /all) and the server-picker buttons they produce.

Server selection:
    - an argument is matched against the user's servers by key, then name;
    - a single server is used directly;
    - several servers and no argument -> one button per server.
"""

from functools import partial

from bot.callback_data import METRIC_KINDS, ShowMetric
from models.command import CommandDescriptor, RequestContext
from models.server import UserServer
from services.metrics_cache import MetricsCache
from services.metrics_formatter import format_metric
from services.server_service import ServerService, match_server
from utils.errors import BotError, NotFoundError, user_message
from utils.logger import get_logger

logger = get_logger(__name__)

DESCRIPTIONS = {
    "cpu": "🖥️ CPU usage",
    "memory": "💾 Memory usage",
    "disk": "💿 Disk space",
    "temp": "🌡️ Temperatures",
    "network": "🌐 Network traffic",
    "system": "ℹ️ System information",
    "all": "📊 All metrics at a glance",
}

NO_SERVERS_TEXT = "You have no servers yet.\n\nUse /add <server_key> to add one."
UNKNOWN_SERVER_TEXT = "❌ No server matches \"{ref}\". See /servers."
PICK_SERVER_TEXT = "Choose a server:"
METRICS_NOT_FOUND_TEXT = "❌ The monitoring service has no metrics for {key} yet."


class MetricsHandlers:
    """Metric commands backed by the shared MetricsCache."""

    def __init__(self, server_service: ServerService, cache: MetricsCache):
        self.servers = server_service
        self.cache = cache

    def commands(self) -> list[CommandDescriptor]:
        return [
            CommandDescriptor(kind, DESCRIPTIONS[kind], partial(self.metric_command, kind))
            for kind in METRIC_KINDS
        ]

    def callbacks(self) -> dict:
        return {ShowMetric: self.metric_callback}

    async def metric_command(self, kind: str, ctx: RequestContext) -> None:
        """Handle /<kind> [server]."""
        servers = await self.servers.list_servers(ctx.user)
        if not servers:
            await ctx.reply(NO_SERVERS_TEXT)
            return

        if ctx.args:
            ref = " ".join(ctx.args)
            server = match_server(servers, ref)
            if server is None:
                await ctx.reply(UNKNOWN_SERVER_TEXT.format(ref=ref))
                return
        elif len(servers) == 1:
            server = servers[0]
        else:
            keyboard = [[(s.label(), ShowMetric(kind, s.server_key))] for s in servers]
            await ctx.reply(PICK_SERVER_TEXT, keyboard)
            return

        await ctx.reply(await self._render(kind, server))

    async def metric_callback(self, ctx: RequestContext, action: ShowMetric) -> None:
        server = await self.servers.find_server(ctx.user, action.key)
        if server is None or server.server_key != action.key:
            await ctx.edit(UNKNOWN_SERVER_TEXT.format(ref=action.key))
            return
        await ctx.edit(await self._render(action.metric, server))

    async def _render(self, kind: str, server: UserServer) -> str:
        try:
            metrics = await self.cache.get(server.server_key)
        except NotFoundError:
            return METRICS_NOT_FOUND_TEXT.format(key=server.server_key)
        except BotError as e:
            logger.error(
                f"Metrics '{kind}' for {server.server_key} failed (caller {server.user_id}): {e}"
            )
            return user_message(e)
        return format_metric(kind, metrics, server.label())
