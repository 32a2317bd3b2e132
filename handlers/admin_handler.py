"""
handlers/admin_handler.py
--------------------------
Admin-only commands: inspecting and busting the metrics cache, and
soft-deactivating users. Hidden from the public command menu.
"""

from models.command import PERMISSION_ADMIN, CommandDescriptor, RequestContext
from services.metrics_cache import MetricsCache
from services.user_service import UserService
from utils.logger import get_logger

logger = get_logger(__name__)

DEACTIVATE_USAGE_TEXT = "Usage: /deactivate <telegram_id>"


class AdminHandlers:

    def __init__(self, cache: MetricsCache, user_service: UserService):
        self.cache = cache
        self.users = user_service

    def commands(self) -> list[CommandDescriptor]:
        return [
            CommandDescriptor(
                "cache_status", "📦 Metrics cache status", self.cache_status_command,
                permissions=(PERMISSION_ADMIN,), hidden=True,
            ),
            CommandDescriptor(
                "cache_clear", "🧹 Clear the metrics cache", self.cache_clear_command,
                permissions=(PERMISSION_ADMIN,), hidden=True,
            ),
            CommandDescriptor(
                "deactivate", "🚫 Deactivate a user", self.deactivate_command,
                permissions=(PERMISSION_ADMIN,), hidden=True,
            ),
        ]

    async def cache_status_command(self, ctx: RequestContext) -> None:
        status = await self.cache.status()
        lines = [
            "📦 Metrics cache",
            f"- Cached servers: {status['cached_servers']}",
            f"- Hits: {status['hits']}",
            f"- Misses: {status['misses']}",
            f"- TTL: {status['ttl_seconds']:.0f}s",
        ]
        if status["cache_entries"]:
            lines.append("- Keys: " + ", ".join(status["cache_entries"]))
        await ctx.reply("\n".join(lines))

    async def cache_clear_command(self, ctx: RequestContext) -> None:
        """Handle /cache_clear [key ...] - drop given keys, or everything."""
        removed = await self.cache.clear(*ctx.args)
        logger.info(f"Admin {ctx.user.telegram_id} cleared cache ({removed} removed, keys={list(ctx.args)})")
        scope = "selected entries" if ctx.args else "whole cache"
        await ctx.reply(f"🧹 Cleared {scope}: {removed} entr{'y' if removed == 1 else 'ies'} removed.")

    async def deactivate_command(self, ctx: RequestContext) -> None:
        """
        Handle /deactivate <telegram_id>.

        The row is kept; the dispatcher refuses every later update from
        that user.
        """
        if len(ctx.args) != 1 or not ctx.args[0].isdigit():
            await ctx.reply(DEACTIVATE_USAGE_TEXT)
            return

        telegram_id = int(ctx.args[0])
        if telegram_id == ctx.user.telegram_id:
            await ctx.reply("⚠️ You cannot deactivate yourself.")
            return

        target = await self.users.get(telegram_id)
        if target is None:
            await ctx.reply(f"❌ No user with Telegram ID {telegram_id}.")
            return
        if not target.is_active:
            await ctx.reply(f"ℹ️ User {telegram_id} is already deactivated.")
            return

        await self.users.deactivate(telegram_id)
        logger.info(f"Admin {ctx.user.telegram_id} deactivated user {telegram_id}")
        await ctx.reply(f"🚫 User {telegram_id} deactivated.")
