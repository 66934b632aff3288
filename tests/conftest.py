"""Pytest configuration and shared fakes."""

import asyncio

import pytest

from mailbot.core.addresses import AddressBook
from mailbot.core.models import Attachment, Message
from mailbot.core.poller import InboxPoller
from mailbot.memory.state_store import JsonStateStore
from mailbot.scheduler.sweep import Scheduler


class FakeMailClient:
    """In-memory provider. ``inboxes`` maps address -> list of Message."""

    def __init__(self, domains=None):
        self.domains = list(domains or [])
        self.inboxes = {}
        self.attachments = {}
        self.failing = set()
        self.attachment_calls = []

    def set_messages(self, address, ids, **fields):
        self.inboxes[address] = [Message(id=str(i), **fields) for i in ids]

    async def list_domains(self):
        await asyncio.sleep(0)
        return list(self.domains)

    async def list_messages(self, address):
        await asyncio.sleep(0)
        if address in self.failing:
            raise RuntimeError(f"provider down for {address}")
        return list(self.inboxes.get(address, []))

    async def list_attachments(self, address, limit=50, offset=0):
        await asyncio.sleep(0)
        self.attachment_calls.append((address, limit, offset))
        return list(self.attachments.get(address, []))

    def generate_address(self, domains):
        from mailbot.integrations.barid import generate_address

        return generate_address(domains)


class FakeNotifier:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def notify(self, user_id, text):
        await asyncio.sleep(0)
        self.sent.append((str(user_id), text))
        return not self.fail

    def texts_for(self, user_id):
        return [text for uid, text in self.sent if uid == str(user_id)]


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "bot_data.json"


@pytest.fixture
def store(state_path):
    return JsonStateStore(state_path)


@pytest.fixture
def mail_client():
    return FakeMailClient(domains=["a.test", "b.test"])


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def notifier_factory():
    return FakeNotifier


@pytest.fixture
def poller(store, mail_client, notifier):
    return InboxPoller(store, mail_client, notifier)


@pytest.fixture
def scheduler(store, poller):
    return Scheduler(store, poller, interval_ms=60000)


@pytest.fixture
def address_book(store, mail_client, scheduler):
    return AddressBook(store, mail_client, scheduler)


@pytest.fixture
def sample_attachment():
    return Attachment(filename="invoice.pdf", url="https://files.test/invoice.pdf", size=2048)
