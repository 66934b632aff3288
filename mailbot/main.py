import structlog
from telegram.ext import Application, CommandHandler

from mailbot import config
from mailbot.bot.notifier import TelegramNotifier
from mailbot.bot.telegram_handler import (
    handle_add,
    handle_check,
    handle_clear,
    handle_delete,
    handle_export,
    handle_help,
    handle_import,
    handle_list,
    handle_new,
)
from mailbot.core.addresses import AddressBook
from mailbot.core.poller import InboxPoller
from mailbot.exceptions import ConfigurationError
from mailbot.integrations.barid import BaridClient
from mailbot.log import configure_logging
from mailbot.memory.state_store import JsonStateStore
from mailbot.scheduler.sweep import Scheduler

logger = structlog.get_logger()

COMMANDS = [
    (("start", "help"), handle_help),
    ("new", handle_new),
    ("add", handle_add),
    ("delete", handle_delete),
    ("list", handle_list),
    ("check", handle_check),
    ("clear", handle_clear),
    ("export", handle_export),
    ("import", handle_import),
]


def build_application(token, store, mail_client):
    """Wire store, provider, poller and scheduler into a Telegram application."""

    async def _shutdown(app):
        await store.save()
        await mail_client.aclose()

    app = Application.builder().token(token).post_shutdown(_shutdown).build()

    poller = InboxPoller(store, mail_client, TelegramNotifier(app.bot))
    scheduler = Scheduler(store, poller, interval_ms=config.POLL_INTERVAL_MS)
    app.bot_data["address_book"] = AddressBook(store, mail_client, scheduler)
    app.bot_data["scheduler"] = scheduler

    for names, handler in COMMANDS:
        app.add_handler(CommandHandler(names, handler))

    scheduler.schedule(app.job_queue)
    return app


def main():
    configure_logging(config.LOG_LEVEL)
    try:
        token = config.require_token()
    except ConfigurationError as e:
        logger.error("startup_aborted", error=str(e))
        raise SystemExit(1) from e

    store = JsonStateStore(config.DATA_PATH)
    store.load()

    logger.info(
        "bot_starting",
        poll_interval_ms=config.POLL_INTERVAL_MS,
        mail_api=config.MAIL_API_BASE_URL,
        data_path=config.DATA_PATH,
        allowed_users=config.ALLOWED_USERS or "everyone",
    )

    app = build_application(token, store, BaridClient())
    logger.info("bot_running")
    app.run_polling()


if __name__ == "__main__":
    main()
