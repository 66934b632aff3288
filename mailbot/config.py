"""Configuration loaded from environment variables."""

import os

from dotenv import load_dotenv

from mailbot.exceptions import ConfigurationError

load_dotenv()


# Telegram
TELEGRAM_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN") or os.getenv("BOT_TOKEN", "")
ALLOWED_USERS = [
    int(uid.strip())
    for uid in os.getenv("TELEGRAM_ALLOWED_USER_IDS", "").split(",")
    if uid.strip()
]

# Mail provider
MAIL_API_BASE_URL = os.getenv("MAIL_API_BASE_URL", "https://api.barid.site")
MAIL_API_TIMEOUT = float(os.getenv("MAIL_API_TIMEOUT", "10"))

# Polling
POLL_INTERVAL_MS = int(os.getenv("POLL_INTERVAL_MS", "60000"))

# Storage
DATA_PATH = os.getenv("DATA_PATH", "data/bot_data.json")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def require_token(token=None):
    """Return the bot token or halt startup when it is missing."""
    token = TELEGRAM_TOKEN if token is None else token
    if not token:
        raise ConfigurationError("Set TELEGRAM_BOT_TOKEN (or BOT_TOKEN) in .env")
    return token


def is_allowed(user_id):
    """Everyone is allowed when no allowlist is configured."""
    return not ALLOWED_USERS or user_id in ALLOWED_USERS
