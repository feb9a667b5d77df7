"""User notifications: log line by default, Telegram message when a bot is configured."""

import logging

from telegram import Bot
from telegram.error import TelegramError

logger = logging.getLogger(__name__)


class LoggingNotifier:
    async def notify(self, message: str) -> None:
        logger.info("Notification: %s", message)


class TelegramNotifier:
    """Sends each notification as a message to one chat."""

    def __init__(self, token: str, chat_id: int | str, *, bot: Bot | None = None) -> None:
        self._bot = bot or Bot(token=token)
        self._chat_id = chat_id

    async def notify(self, message: str) -> None:
        try:
            await self._bot.send_message(chat_id=self._chat_id, text=message)
        except TelegramError:
            logger.warning("Telegram notification failed: %s", message, exc_info=True)
