HELP_TEXT = """👋 Welcome — Temp Mail Bot
Available commands:
/new - create a new temporary email
/add <email> - track an existing email
/delete <email> - stop tracking an email
/list - show tracked emails
/check - manually check all emails
/clear - remove all tracked emails
/export - export tracked emails
/import <email1,email2,...> - import emails
/help - show this help message"""

ADD_USAGE = "❌ Please provide an email address.\nUsage: /add email@example.com"
DELETE_USAGE = "❌ Please provide an email address.\nUsage: /delete email@example.com"
IMPORT_USAGE = "❌ Please provide emails.\nUsage: /import email1@domain.com,email2@domain.com"


def format_new_mail(address, message):
    """Notification text for a newly seen message."""
    lines = [
        f"📧 New email for {address}",
        f"From: {message.sender or 'unknown'}",
        f"Subject: {message.subject or '(no subject)'}",
        f"ID: {message.id}",
    ]
    if message.preview:
        lines.append(f"Preview: {message.preview}")
    return "\n\n".join(lines)


def format_attachment(attachment):
    size = attachment.size or "unknown"
    return f"📎 Attachment: {attachment.filename}\nSize: {size}\nURL: {attachment.url}"


def format_address_list(title, addresses):
    return f"{title} ({len(addresses)}):\n\n" + "\n".join(addresses)
