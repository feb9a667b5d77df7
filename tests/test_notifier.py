"""Notifiers: Telegram delivery through an injected bot, and the logging default."""

import logging

from telegram.error import TelegramError

from rapport.infrastructure import LoggingNotifier, TelegramNotifier


class _FakeBot:
    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[dict] = []
        self._error = error

    async def send_message(self, chat_id, text):
        if self._error is not None:
            raise self._error
        self.sent.append({"chat_id": chat_id, "text": text})


async def test_telegram_sends_to_configured_chat() -> None:
    bot = _FakeBot()
    notifier = TelegramNotifier("token", 12345, bot=bot)
    await notifier.notify("Found 2 new LinkedIn interactions!")
    assert bot.sent == [{"chat_id": 12345, "text": "Found 2 new LinkedIn interactions!"}]


async def test_telegram_error_is_logged_not_raised(caplog) -> None:
    notifier = TelegramNotifier("token", "chat", bot=_FakeBot(TelegramError("blocked")))
    with caplog.at_level(logging.WARNING, logger="rapport.infrastructure.notifier"):
        await notifier.notify("Failed to sync LinkedIn interactions")
    assert "Telegram notification failed" in caplog.text


async def test_logging_notifier(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="rapport.infrastructure.notifier"):
        await LoggingNotifier().notify("Found 1 new LinkedIn interaction!")
    assert "Found 1 new LinkedIn interaction!" in caplog.text
