"""Normalized shapes of what the mail provider returns."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Message:
    """One message visible in a tracked inbox."""

    id: str
    sender: str | None = None
    subject: str | None = None
    preview: str | None = None
    has_attachments: bool = False

    @classmethod
    def from_api(cls, raw: dict) -> Message:
        return cls(
            id=str(raw["id"]),
            sender=raw.get("from") or raw.get("from_address"),
            subject=raw.get("subject"),
            preview=raw.get("preview"),
            has_attachments=bool(raw.get("hasAttachments") or raw.get("has_attachments")),
        )


@dataclass(frozen=True)
class Attachment:
    """A downloadable attachment reachable from an address.

    The provider lists attachments per address, so this is not tied to a
    specific message.
    """

    filename: str
    url: str
    size: int | str | None = None

    @classmethod
    def from_api(cls, raw: dict) -> Attachment:
        return cls(
            filename=raw.get("filename") or raw.get("name") or "unnamed",
            url=raw.get("url") or "",
            size=raw.get("size"),
        )
