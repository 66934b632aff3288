"""Client for the barid.site temporary mail REST API.

Every public call degrades to an empty result on transport or protocol
errors: the poll loop treats "no data" as "nothing new this cycle".
"""

from __future__ import annotations

import asyncio
import secrets
import string
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from mailbot import config
from mailbot.core.models import Attachment, Message
from mailbot.exceptions import ProviderError

logger = structlog.get_logger()

LOCAL_PART_ALPHABET = string.ascii_lowercase + string.digits
LOCAL_PART_LENGTH = 8
ATTACHMENT_PAGE_SIZE = 50


def generate_address(domains: list[str]) -> str:
    """Random ``<8 chars of [a-z0-9]>@<domain>`` address on one of ``domains``."""
    if not domains:
        raise ValueError("at least one domain is required")
    local = "".join(secrets.choice(LOCAL_PART_ALPHABET) for _ in range(LOCAL_PART_LENGTH))
    return f"{local}@{secrets.choice(list(domains))}"


def _unwrap(payload: Any) -> list:
    """Accept both ``{"success": true, "result": [...]}`` and a bare list."""
    if isinstance(payload, dict):
        if payload.get("success") and isinstance(payload.get("result"), list):
            return payload["result"]
        raise ProviderError(f"unexpected response: {str(payload)[:200]}")
    if isinstance(payload, list):
        return payload
    raise ProviderError(f"unexpected response type {type(payload).__name__}")


class BaridClient:
    """Mail provider client backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or config.MAIL_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.MAIL_API_TIMEOUT
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def list_domains(self) -> list[str]:
        try:
            items = await self._get_list("/domains")
        except ProviderError as exc:
            logger.error("list_domains_failed", error=str(exc))
            return []
        return [str(domain) for domain in items if domain]

    async def list_messages(self, address: str) -> list[Message]:
        try:
            items = await self._get_list(f"/emails/{quote(address, safe='')}")
        except ProviderError as exc:
            logger.error("list_messages_failed", address=address, error=str(exc))
            return []

        messages = []
        for raw in items:
            if not isinstance(raw, dict) or raw.get("id") in (None, ""):
                logger.warning("message_without_id_skipped", address=address)
                continue
            messages.append(Message.from_api(raw))
        return messages

    async def list_attachments(
        self,
        address: str,
        limit: int = ATTACHMENT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Attachment]:
        try:
            items = await self._get_list(
                f"/emails/{quote(address, safe='')}/attachments",
                params={"limit": limit, "offset": offset},
            )
        except ProviderError as exc:
            logger.error("list_attachments_failed", address=address, error=str(exc))
            return []
        return [Attachment.from_api(raw) for raw in items if isinstance(raw, dict)]

    def generate_address(self, domains: list[str]) -> str:
        return generate_address(domains)

    async def _get_list(self, path: str, params: dict | None = None) -> list:
        try:
            # httpx timeouts bound each phase; wait_for bounds the whole call.
            response = await asyncio.wait_for(
                self._client.get(path, params=params, timeout=self.timeout),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise ProviderError(f"timeout after {self.timeout}s on {path}") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise ProviderError(f"invalid JSON from {path}") from exc
        return _unwrap(payload)
