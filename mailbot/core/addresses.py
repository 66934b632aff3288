"""Address-list operations behind the chat commands.

Each mutating operation holds the user's lock and ends with a full persist,
so it never interleaves with a poll cycle for the same user.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger()


def parse_address_list(text: str) -> list[str]:
    """Split ``a@x, b@y,,c@z`` into trimmed, non-empty items."""
    return [item.strip() for item in text.split(",") if item.strip()]


class AddressBook:
    def __init__(self, store, mail_client, scheduler) -> None:
        self.store = store
        self.mail_client = mail_client
        self.scheduler = scheduler

    async def create_address(self, user_id) -> str | None:
        """Generate and track a new address; ``None`` when the provider has no domains."""
        domains = await self.mail_client.list_domains()
        if not domains:
            logger.warning("create_address_no_domains", user_id=str(user_id))
            return None

        async with self.store.lock(user_id):
            state = self.store.ensure_user(user_id)
            address = self.mail_client.generate_address(domains)
            while address in state.tracked_addresses:
                address = self.mail_client.generate_address(domains)
            state.tracked_addresses.append(address)
            await self.store.save()

        logger.info("address_created", user_id=str(user_id), address=address)
        return address

    async def add_address(self, user_id, address: str) -> bool:
        """Track ``address``; ``False`` if it was already tracked."""
        async with self.store.lock(user_id):
            state = self.store.ensure_user(user_id)
            if address in state.tracked_addresses:
                return False
            state.tracked_addresses.append(address)
            await self.store.save()
        logger.info("address_added", user_id=str(user_id), address=address)
        return True

    async def remove_address(self, user_id, address: str) -> bool:
        """Stop tracking ``address`` and forget which of its messages were seen."""
        async with self.store.lock(user_id):
            state = self.store.ensure_user(user_id)
            found = address in state.tracked_addresses
            state.tracked_addresses = [a for a in state.tracked_addresses if a != address]
            state.seen_messages.pop(address, None)
            await self.store.save()
        if found:
            logger.info("address_removed", user_id=str(user_id), address=address)
        return found

    def list_addresses(self, user_id) -> list[str]:
        return list(self.store.ensure_user(user_id).tracked_addresses)

    # Export is a plain listing today.
    export_addresses = list_addresses

    async def clear_all(self, user_id) -> int:
        """Drop every tracked address and seen-set; returns how many were tracked."""
        async with self.store.lock(user_id):
            state = self.store.ensure_user(user_id)
            count = len(state.tracked_addresses)
            state.tracked_addresses = []
            state.seen_messages = {}
            await self.store.save()
        logger.info("addresses_cleared", user_id=str(user_id), count=count)
        return count

    async def import_addresses(self, user_id, addresses: list[str]) -> int:
        """Track each address not already tracked; returns how many were added."""
        async with self.store.lock(user_id):
            state = self.store.ensure_user(user_id)
            added = 0
            for address in addresses:
                if address not in state.tracked_addresses:
                    state.tracked_addresses.append(address)
                    added += 1
            await self.store.save()
        logger.info("addresses_imported", user_id=str(user_id), added=added)
        return added

    async def check_now(self, user_id) -> int:
        return await self.scheduler.sweep_user(user_id)
