import structlog
from telegram import Update
from telegram.ext import ContextTypes

from mailbot.config import is_allowed
from mailbot.core.addresses import parse_address_list
from mailbot.core.messages import (
    ADD_USAGE,
    DELETE_USAGE,
    HELP_TEXT,
    IMPORT_USAGE,
    format_address_list,
)

logger = structlog.get_logger()


def _address_book(context):
    return context.bot_data["address_book"]


def _authorized(update):
    user = update.effective_user
    if user is None or not is_allowed(user.id):
        logger.warning("unauthorized_command", user_id=getattr(user, "id", None))
        return False
    return True


async def handle_help(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start and /help."""
    if not _authorized(update):
        return
    _address_book(context).store.ensure_user(update.effective_chat.id)
    await update.message.reply_text(HELP_TEXT)


async def handle_new(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /new: generate a fresh temporary address and track it."""
    if not _authorized(update):
        return
    address = await _address_book(context).create_address(update.effective_chat.id)
    if address is None:
        await update.message.reply_text("❌ Could not fetch domains from the mail provider")
        return
    await update.message.reply_text(f"🆕 New temporary email created: {address}")


async def handle_add(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not _authorized(update):
        return
    if not context.args:
        await update.message.reply_text(ADD_USAGE)
        return

    address = context.args[0].strip()
    if await _address_book(context).add_address(update.effective_chat.id, address):
        await update.message.reply_text(f"✅ Now tracking: {address}")
    else:
        await update.message.reply_text(f"ℹ️ Already tracking: {address}")


async def handle_delete(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not _authorized(update):
        return
    if not context.args:
        await update.message.reply_text(DELETE_USAGE)
        return

    address = context.args[0].strip()
    if await _address_book(context).remove_address(update.effective_chat.id, address):
        await update.message.reply_text(f"🗑️ Stopped tracking: {address}")
    else:
        await update.message.reply_text(f"❌ Email not found: {address}")


async def handle_list(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not _authorized(update):
        return
    addresses = _address_book(context).list_addresses(update.effective_chat.id)
    if not addresses:
        await update.message.reply_text("No tracked emails.")
        return
    await update.message.reply_text(format_address_list("📋 Tracked emails", addresses))


async def handle_check(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /check: sweep this user's addresses now, in the background."""
    if not _authorized(update):
        return
    chat_id = update.effective_chat.id
    book = _address_book(context)
    book.store.ensure_user(chat_id)
    await update.message.reply_text("🔄 Manual check started...")
    context.application.create_task(book.check_now(chat_id), update=update)


async def handle_clear(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not _authorized(update):
        return
    count = await _address_book(context).clear_all(update.effective_chat.id)
    await update.message.reply_text(f"🗑️ Cleared {count} tracked email(s).")


async def handle_export(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not _authorized(update):
        return
    addresses = _address_book(context).export_addresses(update.effective_chat.id)
    if not addresses:
        await update.message.reply_text("No emails to export.")
        return
    await update.message.reply_text(format_address_list("📤 Exported emails", addresses))


async def handle_import(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /import a@x,b@y. Spaces around the commas are allowed."""
    if not _authorized(update):
        return
    addresses = parse_address_list(",".join(context.args or []))
    if not addresses:
        await update.message.reply_text(IMPORT_USAGE)
        return

    chat_id = update.effective_chat.id
    book = _address_book(context)
    imported = await book.import_addresses(chat_id, addresses)
    total = len(book.list_addresses(chat_id))
    await update.message.reply_text(
        f"✅ Imported {imported} new email(s). Total tracked: {total}"
    )
