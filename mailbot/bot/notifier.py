import structlog
from telegram.error import TelegramError

logger = structlog.get_logger()


class TelegramNotifier:
    """Sends notification text to a chat, swallowing delivery failures."""

    def __init__(self, bot):
        self.bot = bot

    async def notify(self, user_id, text):
        try:
            await self.bot.send_message(chat_id=user_id, text=text)
        except TelegramError as e:
            # Blocked chats, flood limits and network errors all land here.
            logger.error("telegram_send_failed", chat_id=user_id, error=str(e))
            return False
        return True
