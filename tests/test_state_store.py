"""Unit tests for the JSON state store."""

import json

import pytest

from mailbot.memory.state_store import JsonStateStore, UserState


def test_load_missing_file_returns_empty(store) -> None:
    assert store.load() == {}
    assert store.user_ids() == []


def test_load_reads_existing_snapshot_format(state_path) -> None:
    state_path.write_text(
        json.dumps(
            {
                "123": {
                    "emails": ["x@a.test", "y@b.test"],
                    "seenEmails": {"x@a.test": {"1": True, "2": True}},
                }
            }
        )
    )

    users = JsonStateStore(state_path).load()

    assert users["123"].tracked_addresses == ["x@a.test", "y@b.test"]
    assert users["123"].seen_messages == {"x@a.test": {"1", "2"}}


def test_load_drops_duplicate_addresses(state_path) -> None:
    state_path.write_text(json.dumps({"1": {"emails": ["x@a.test", "x@a.test"], "seenEmails": {}}}))

    users = JsonStateStore(state_path).load()

    assert users["1"].tracked_addresses == ["x@a.test"]


def test_load_malformed_file_continues_empty_and_keeps_copy(state_path) -> None:
    state_path.write_text("{not json")

    store = JsonStateStore(state_path)

    assert store.load() == {}
    corrupt = state_path.with_name(state_path.name + ".corrupt")
    assert corrupt.read_text() == "{not json"
    assert not state_path.exists()


def test_load_wrong_shape_is_treated_as_malformed(state_path) -> None:
    state_path.write_text(json.dumps(["not", "an", "object"]))

    assert JsonStateStore(state_path).load() == {}


@pytest.mark.asyncio
async def test_save_writes_complete_snapshot(store, state_path) -> None:
    state = store.ensure_user(42)
    state.tracked_addresses.append("x@a.test")
    state.seen_for("x@a.test").update({"2", "1"})

    assert await store.save() is True

    assert json.loads(state_path.read_text()) == {
        "42": {"emails": ["x@a.test"], "seenEmails": {"x@a.test": {"1": True, "2": True}}}
    }


@pytest.mark.asyncio
async def test_save_then_load_round_trips(store, state_path) -> None:
    store.ensure_user("7").tracked_addresses.extend(["b@a.test", "a@a.test"])
    store.ensure_user("7").seen_for("b@a.test").add("m1")
    await store.save()

    reloaded = JsonStateStore(state_path).load()

    assert reloaded["7"] == UserState(
        tracked_addresses=["b@a.test", "a@a.test"],
        seen_messages={"b@a.test": {"m1"}},
    )


@pytest.mark.asyncio
async def test_save_failure_is_logged_not_raised(tmp_path) -> None:
    target = tmp_path / "state_dir"
    target.mkdir()
    store = JsonStateStore(target)
    store.ensure_user(1).tracked_addresses.append("x@a.test")

    assert await store.save() is False
    # In-memory state stays authoritative.
    assert store.get_user(1).tracked_addresses == ["x@a.test"]
    assert list(tmp_path.glob(".state_dir.*.tmp")) == []


def test_ensure_user_creates_once_without_persisting(store, state_path) -> None:
    first = store.ensure_user(5)
    second = store.ensure_user("5")

    assert first is second
    assert first == UserState()
    assert not state_path.exists()


def test_lock_is_per_user(store) -> None:
    assert store.lock(1) is store.lock("1")
    assert store.lock(1) is not store.lock(2)
