"""Fetch-diff-notify-persist cycle for one tracked inbox."""

from __future__ import annotations

import structlog

from mailbot.core.messages import format_attachment, format_new_mail
from mailbot.integrations.barid import ATTACHMENT_PAGE_SIZE

logger = structlog.get_logger()


class InboxPoller:
    """Notifies a user about messages in one address they have not seen yet.

    Args:
        store: State store owning every user's seen-sets.
        mail_client: Provider client (``list_messages``/``list_attachments``).
        notifier: Anything with ``async notify(user_id, text) -> bool``.
    """

    def __init__(self, store, mail_client, notifier) -> None:
        self.store = store
        self.mail_client = mail_client
        self.notifier = notifier

    async def poll(self, user_id, address: str) -> int:
        """Run one poll cycle and return how many new messages were notified.

        Never raises: provider, delivery and persistence failures are logged
        and the next scheduled cycle picks up where this one stopped. The
        count includes messages notified before a failure.
        """
        notified = 0
        try:
            async with self.store.lock(user_id):
                async for _ in self._notify_new(user_id, address):
                    notified += 1
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "poll_failed",
                user_id=str(user_id),
                address=address,
                notified=notified,
                error=str(exc),
            )
        if notified:
            logger.info("new_mail_notified", user_id=str(user_id), address=address, count=notified)
        return notified

    async def _notify_new(self, user_id, address: str):
        """Yield the id of each message notified, saving state after each one."""
        state = self.store.ensure_user(user_id)
        if address not in state.tracked_addresses:
            # Removed while this cycle was waiting for the lock.
            logger.debug("poll_skipped_untracked", user_id=str(user_id), address=address)
            return

        messages = await self.mail_client.list_messages(address)
        if not messages:
            return

        seen = state.seen_for(address)
        for message in messages:
            if message.id in seen:
                continue

            # Marked before sending: an id is notified at most once.
            seen.add(message.id)
            await self.notifier.notify(user_id, format_new_mail(address, message))

            if message.has_attachments:
                # The provider only exposes an address-wide attachment page, so
                # with several new messages in one cycle these may belong to
                # another message.
                attachments = await self.mail_client.list_attachments(
                    address, ATTACHMENT_PAGE_SIZE, 0
                )
                for attachment in attachments:
                    await self.notifier.notify(user_id, format_attachment(attachment))

            await self.store.save()
            yield message.id
