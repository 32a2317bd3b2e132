"""
bot/transport.py
----------------
Thin wrapper over python-telegram-bot's `Bot` used for every outgoing call.
Handlers never touch telegram objects directly; they talk to this class
through `RequestContext`, which keeps them testable with a mock transport.
"""

from typing import Iterable, Optional

from telegram import Bot, BotCommand, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.error import BadRequest

from bot import callback_data
from models.command import CommandDescriptor, Keyboard
from utils.logger import get_logger

logger = get_logger(__name__)


def build_markup(keyboard: Optional[Keyboard]) -> Optional[InlineKeyboardMarkup]:
    """
    Render rows of (label, action) pairs into an inline keyboard.
    Buttons whose payload cannot be encoded are dropped with a warning.
    """
    if not keyboard:
        return None

    rows = []
    for row in keyboard:
        buttons = []
        for label, action in row:
            try:
                data = callback_data.encode(action)
            except ValueError as e:
                logger.warning(f"Dropping button {label!r}: {e}")
                continue
            buttons.append(InlineKeyboardButton(label, callback_data=data))
        if buttons:
            rows.append(buttons)
    return InlineKeyboardMarkup(rows) if rows else None


class TelegramTransport:
    """Chat transport backed by the Telegram Bot API."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_message(self, chat_id: int, text: str, keyboard: Optional[Keyboard] = None) -> None:
        await self.bot.send_message(
            chat_id=chat_id,
            text=text,
            reply_markup=build_markup(keyboard),
        )

    async def answer_callback(self, callback_id: str, text: Optional[str] = None) -> None:
        await self.bot.answer_callback_query(callback_query_id=callback_id, text=text)

    async def edit_message(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        keyboard: Optional[Keyboard] = None,
    ) -> None:
        try:
            await self.bot.edit_message_text(
                chat_id=chat_id,
                message_id=message_id,
                text=text,
                reply_markup=build_markup(keyboard),
            )
        except BadRequest as e:
            # edits that change nothing are rejected by Telegram
            if "message is not modified" in str(e).lower():
                return
            raise

    async def set_commands(self, descriptors: Iterable[CommandDescriptor]) -> None:
        """Publish the public command list as the bot menu."""
        commands = [
            BotCommand(d.name, d.description)
            for d in descriptors
            if not d.hidden
        ]
        await self.bot.set_my_commands(commands)
        logger.info(f"Bot commands menu registered ({len(commands)} commands).")
