"""Unit tests for the Telegram notifier."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.error import Forbidden, NetworkError

from mailbot.bot.notifier import TelegramNotifier


@pytest.mark.asyncio
async def test_notify_sends_to_chat() -> None:
    bot = MagicMock()
    bot.send_message = AsyncMock()

    assert await TelegramNotifier(bot).notify(42, "hello") is True

    bot.send_message.assert_awaited_once_with(chat_id=42, text="hello")


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [Forbidden("bot was blocked by the user"), NetworkError("reset")])
async def test_notify_swallows_delivery_errors(error) -> None:
    bot = MagicMock()
    bot.send_message = AsyncMock(side_effect=error)

    assert await TelegramNotifier(bot).notify(42, "hello") is False
