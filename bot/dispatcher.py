"""
bot/dispatcher.py
-----------------
Turns one inbound Telegram update into a routed command or callback.

Order of checks for every update:
    1. Commands addressed to another bot ("/help@other_bot") are ignored;
       callback queries are acknowledged straight away.
    2. Allow-list, then the per-user rate limiter.
    3. Best-effort user upsert (a database outage never blocks the reply).
    4. Deactivated users are denied.
    5. Classification: "/command" -> router, callback -> registered action
       handler, anything else -> static usage hint.

The dispatcher holds no locks; python-telegram-bot runs several updates
concurrently and ordering across chats is not guaranteed.
"""

from typing import Awaitable, Callable, Iterable, Optional

from bot import callback_data
from bot.outcome import Outcome
from bot.router import CommandRouter
from models.command import RequestContext
from models.user import User
from security.auth import ACCESS_DENIED_TEXT, is_allowed
from security.rate_limiter import RATE_LIMITED_TEXT, RateLimiter
from utils.errors import GENERIC_FAILURE
from utils.logger import get_logger
from utils.validators import sanitize_input

logger = get_logger(__name__)

FREE_TEXT_HINT = (
    "🤖 I only understand commands.\n\n"
    "Use /help to see what I can do."
)
SERVER_KEY_HINT = (
    "💡 That looks like a server key.\n\n"
    "To add it, send:\n/add {key}"
)
UNKNOWN_ACTION_TEXT = "❓ Unknown action. Use /servers to start over."

SERVER_KEY_PREFIX = "srv_"

CallbackHandler = Callable[[RequestContext, object], Awaitable[None]]


class UpdateDispatcher:
    """
    Entry point for every update python-telegram-bot delivers.

    Args:
        router: Command router built at startup.
        user_service: Service used to upsert the sender.
        transport: Chat transport for replies and callback acks.
        rate_limiter: Optional per-user limiter.
        allowed_user_ids: Allow-list; empty allows everyone.
        bot_username: This bot's username; "/cmd@other_bot" is ignored when set.
    """

    def __init__(
        self,
        router: CommandRouter,
        user_service,
        transport,
        rate_limiter: Optional[RateLimiter] = None,
        allowed_user_ids: Iterable[int] = (),
        bot_username: Optional[str] = None,
    ):
        self.router = router
        self.user_service = user_service
        self.transport = transport
        self.rate_limiter = rate_limiter
        self.allowed_user_ids = list(allowed_user_ids)
        self.bot_username = bot_username
        self._callbacks: dict[type, CallbackHandler] = {}

    def register_callback(self, action_type: type, handler: CallbackHandler) -> None:
        """Bind a decoded callback action type to its handler."""
        if action_type in self._callbacks:
            logger.warning(f"Callback handler for {action_type.__name__} registered twice; keeping the latest.")
        self._callbacks[action_type] = handler

    async def handle_update(self, update, context) -> None:
        """python-telegram-bot callback for a TypeHandler(Update, ...)."""
        await self.handle(update)

    async def handle(self, update) -> Outcome:
        """
        Process one update.

        Returns:
            What happened, for logging and tests.
        """
        query = update.callback_query
        message = update.message if query is None else None
        if query is None and message is None:
            return Outcome.IGNORED

        tg_user = update.effective_user
        if tg_user is None:
            return Outcome.IGNORED
        if message is not None and self._addressed_to_other_bot(message.text):
            return Outcome.IGNORED

        chat = update.effective_chat
        chat_id = chat.id if chat is not None else tg_user.id

        if query is not None:
            await self._acknowledge(query)

        if not is_allowed(tg_user.id, self.allowed_user_ids):
            await self.transport.send_message(chat_id, ACCESS_DENIED_TEXT)
            return Outcome.UNAUTHORIZED

        if self.rate_limiter is not None and not self.rate_limiter.allow(tg_user.id):
            await self.transport.send_message(chat_id, RATE_LIMITED_TEXT)
            return Outcome.RATE_LIMITED

        user = await self._resolve_user(tg_user)
        if not user.is_active:
            logger.warning(f"🚫 Deactivated user {tg_user.id} tried to use the bot")
            await self.transport.send_message(chat_id, ACCESS_DENIED_TEXT)
            return Outcome.UNAUTHORIZED

        if query is not None:
            message_id = query.message.message_id if query.message is not None else None
            return await self._handle_callback(query.data, user, chat_id, message_id)
        return await self._handle_message(message.text, user, chat_id)

    def _addressed_to_other_bot(self, text: Optional[str]) -> bool:
        """True for "/cmd@name" when name is not this bot."""
        text = sanitize_input(text or "")
        if not self.bot_username or not text.startswith("/"):
            return False
        command = text.split(maxsplit=1)[0]
        _, _, addressee = command.partition("@")
        if addressee and addressee.lower() != self.bot_username.lower():
            logger.debug(f"Ignoring {command} addressed to another bot")
            return True
        return False

    async def _acknowledge(self, query) -> None:
        try:
            await self.transport.answer_callback(query.id)
        except Exception as e:
            logger.warning(f"Failed to answer callback {query.id}: {e}")

    async def _resolve_user(self, tg_user) -> User:
        try:
            return await self.user_service.register(tg_user)
        except Exception as e:
            logger.error(f"User upsert failed for {tg_user.id}, continuing unsaved: {e}")
            return self.user_service.from_telegram(tg_user)

    async def _handle_message(self, text: Optional[str], user: User, chat_id: int) -> Outcome:
        text = sanitize_input(text or "")

        if text.startswith("/"):
            tokens = text.split()
            name = tokens[0][1:].partition("@")[0].lower()
            args = tokens[1:]
            logger.info(f"User {user.telegram_id} -> /{name} {' '.join(args)}".rstrip())
            return await self.router.route(name, args, user, chat_id)

        first = text.split(maxsplit=1)[0] if text else ""
        if first.lower().startswith(SERVER_KEY_PREFIX):
            await self.transport.send_message(chat_id, SERVER_KEY_HINT.format(key=first))
        else:
            await self.transport.send_message(chat_id, FREE_TEXT_HINT)
        return Outcome.FREE_TEXT

    async def _handle_callback(
        self,
        data: Optional[str],
        user: User,
        chat_id: int,
        message_id: Optional[int],
    ) -> Outcome:
        action = callback_data.decode(data)
        handler = self._callbacks.get(type(action)) if action is not None else None
        if handler is None:
            logger.info(f"Unknown callback payload {data!r} from user {user.telegram_id}")
            await self.transport.send_message(chat_id, UNKNOWN_ACTION_TEXT)
            return Outcome.UNKNOWN_ACTION

        ctx = RequestContext(
            user=user,
            chat_id=chat_id,
            transport=self.transport,
            message_id=message_id,
        )
        try:
            await handler(ctx, action)
        except Exception as e:
            logger.error(
                f"Callback {data!r} failed for user {user.telegram_id}: {e}",
                exc_info=True,
            )
            try:
                await self.transport.send_message(chat_id, GENERIC_FAILURE)
            except Exception as send_error:
                logger.error(f"Failed to report callback failure to chat {chat_id}: {send_error}")
            return Outcome.FAILED
        return Outcome.HANDLED
