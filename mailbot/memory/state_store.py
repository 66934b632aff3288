"""Durable per-user state: tracked addresses and already-notified message ids.

The whole mapping is persisted as one JSON snapshot:

    {"<chat id>": {"emails": [...], "seenEmails": {"<address>": {"<id>": true}}}}

Every mutation of a user's state is expected to happen while holding
``store.lock(user_id)`` and to end with ``await store.save()``.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from mailbot.exceptions import StateStoreError

logger = structlog.get_logger()


@dataclass
class UserState:
    tracked_addresses: list[str] = field(default_factory=list)
    seen_messages: dict[str, set[str]] = field(default_factory=dict)

    def seen_for(self, address: str) -> set[str]:
        return self.seen_messages.setdefault(address, set())

    def to_dict(self) -> dict:
        return {
            "emails": list(self.tracked_addresses),
            "seenEmails": {
                address: {message_id: True for message_id in sorted(ids)}
                for address, ids in self.seen_messages.items()
            },
        }

    @classmethod
    def from_dict(cls, raw: dict) -> UserState:
        if not isinstance(raw, dict):
            raise StateStoreError(f"user entry must be an object, got {type(raw).__name__}")

        emails = raw.get("emails") or []
        seen = raw.get("seenEmails") or {}
        if not isinstance(emails, list) or not isinstance(seen, dict):
            raise StateStoreError("'emails' must be a list and 'seenEmails' an object")

        tracked: list[str] = []
        for address in map(str, emails):
            if address not in tracked:
                tracked.append(address)

        seen_messages = {}
        for address, ids in seen.items():
            if not isinstance(ids, dict):
                raise StateStoreError(f"seen ids for {address} must be an object")
            seen_messages[address] = {str(message_id) for message_id, flag in ids.items() if flag}

        return cls(tracked_addresses=tracked, seen_messages=seen_messages)


class JsonStateStore:
    """File-backed owner of every user's state."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self.users: dict[str, UserState] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._write_lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, UserState]:
        """Read the snapshot from disk, replacing the in-memory mapping.

        A missing file yields an empty mapping. A malformed file is moved
        aside to ``<name>.corrupt`` and the bot starts with empty state.
        """
        if not self._path.exists():
            logger.info("state_file_missing", path=str(self._path))
            self.users = {}
            return self.users

        try:
            self.users = self._parse(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError, StateStoreError) as exc:
            logger.error("state_load_failed", path=str(self._path), error=str(exc))
            self._quarantine()
            self.users = {}
            return self.users

        logger.info("state_loaded", path=str(self._path), users=len(self.users))
        return self.users

    async def save(self, users: dict[str, UserState] | None = None) -> bool:
        """Atomically overwrite the snapshot. Failures are logged, not raised."""
        if users is not None:
            self.users = users

        async with self._write_lock:
            # Serialize inside the event loop so the snapshot is consistent.
            payload = json.dumps(
                {user_id: state.to_dict() for user_id, state in self.users.items()},
                indent=2,
                ensure_ascii=False,
            )
            try:
                await asyncio.to_thread(self._write_atomic, payload)
            except OSError as exc:
                logger.error("state_save_failed", path=str(self._path), error=str(exc))
                return False
        return True

    def ensure_user(self, user_id) -> UserState:
        key = str(user_id)
        state = self.users.get(key)
        if state is None:
            state = UserState()
            self.users[key] = state
            logger.debug("user_state_created", user_id=key)
        return state

    def get_user(self, user_id) -> UserState | None:
        return self.users.get(str(user_id))

    def user_ids(self) -> list[str]:
        return list(self.users)

    def lock(self, user_id) -> asyncio.Lock:
        """Per-user lock serializing every read-modify-write of that user."""
        key = str(user_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @staticmethod
    def _parse(text: str) -> dict[str, UserState]:
        raw = json.loads(text)
        if not isinstance(raw, dict):
            raise StateStoreError("state root must be an object")
        return {str(user_id): UserState.from_dict(entry) for user_id, entry in raw.items()}

    def _write_atomic(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _quarantine(self) -> None:
        corrupt = self._path.with_name(self._path.name + ".corrupt")
        try:
            os.replace(self._path, corrupt)
        except OSError as exc:
            logger.error("state_quarantine_failed", path=str(self._path), error=str(exc))
            return
        logger.warning("state_file_quarantined", path=str(corrupt))
