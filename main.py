"""
main.py
-------
Entry point for the ServerPulse Telegram bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Wire the router, dispatcher, services and handlers together.
    - Configure and start the Telegram bot.
"""

import sys

from telegram import Update
from telegram.ext import Application, TypeHandler

from api.monitoring_client import MonitoringClient
from bot.dispatcher import UpdateDispatcher
from bot.router import CommandRouter
from bot.transport import TelegramTransport
from config import (
    ALLOWED_USER_IDS,
    BOT_SOURCE_TAG,
    CONCURRENT_UPDATES,
    METRICS_CACHE_TTL,
    MONITORING_API_TIMEOUT,
    MONITORING_API_URL,
    TELEGRAM_BOT_TOKEN,
)
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from handlers.admin_handler import AdminHandlers
from handlers.metrics_handler import MetricsHandlers
from handlers.server_handler import ServerHandlers
from handlers.start_handler import StartHandlers
from security.rate_limiter import RateLimiter
from services.metrics_cache import MetricsCache
from services.server_service import ServerService
from services.source_reconciler import SourceReconciler
from services.user_service import UserService
from utils.logger import get_logger

logger = get_logger(__name__)


def build_dispatcher(transport, monitoring: MonitoringClient) -> UpdateDispatcher:
    """Construct the router, services and handlers and bind them to a dispatcher."""
    router = CommandRouter(transport)

    cache = MetricsCache(
        monitoring.get_server_metrics,
        ttl=METRICS_CACHE_TTL,
        timeout=MONITORING_API_TIMEOUT,
    )
    server_service = ServerService(SourceReconciler(monitoring, source_tag=BOT_SOURCE_TAG))

    user_service = UserService()
    dispatcher = UpdateDispatcher(
        router,
        user_service,
        transport,
        rate_limiter=RateLimiter(),
        allowed_user_ids=ALLOWED_USER_IDS,
    )

    server_handlers = ServerHandlers(server_service)
    metrics_handlers = MetricsHandlers(server_service, cache)
    handler_groups = [
        StartHandlers(router),
        server_handlers,
        metrics_handlers,
        AdminHandlers(cache, user_service),
    ]
    for group in handler_groups:
        for descriptor in group.commands():
            router.register(descriptor)

    for group in (server_handlers, metrics_handlers):
        for action_type, callback in group.callbacks().items():
            dispatcher.register_callback(action_type, callback)

    logger.info(f"{len(router.descriptors())} commands registered.")
    return dispatcher


def main() -> None:
    """Initialize and run the bot."""
    if not TELEGRAM_BOT_TOKEN:
        logger.error("TELEGRAM_BOT_TOKEN is not set. Add it to .env and restart.")
        sys.exit(1)

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Monitoring API client ──────────────────────────
    monitoring = MonitoringClient(MONITORING_API_URL, timeout=MONITORING_API_TIMEOUT)
    logger.info(f"Monitoring API: {MONITORING_API_URL}")

    async def post_init(application: Application) -> None:
        """Register bot commands menu in Telegram on startup."""
        dispatcher.bot_username = application.bot.username
        await transport.set_commands(dispatcher.router.descriptors())

    async def post_shutdown(application: Application) -> None:
        await monitoring.aclose()
        close_pool()

    # ── 3. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = (
        Application.builder()
        .token(TELEGRAM_BOT_TOKEN)
        .concurrent_updates(CONCURRENT_UPDATES)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )
    transport = TelegramTransport(app.bot)
    dispatcher = build_dispatcher(transport, monitoring)

    # ── 4. One handler for every update ───────────────────
    app.add_handler(TypeHandler(Update, dispatcher.handle_update))

    logger.info("🤖 Bot is running! Press Ctrl+C to stop.")
    app.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
