"""Tests for the per-chat session registry."""

from __future__ import annotations

import asyncio

import pytest

from conftest import settle
from wordrush_game import (
    Difficulty,
    GameRejection,
    Phase,
    PlayerState,
    RejectionReason,
    SessionRegistry,
)


def _alice() -> PlayerState:
    return PlayerState(user_id=1, name="Alice")


def test_create_and_get() -> None:
    registry = SessionRegistry()

    session = registry.create(100, _alice(), Difficulty.EASY)

    assert registry.get(100) is session
    assert 100 in registry
    assert len(registry) == 1
    assert session.phase is Phase.LOBBY
    assert session.difficulty is Difficulty.EASY
    assert [p.name for p in session.players] == ["Alice"]


def test_create_replaces_lobby() -> None:
    registry = SessionRegistry()
    first = registry.create(100, _alice())

    second = registry.create(100, PlayerState(user_id=2, name="Bob"))

    assert registry.get(100) is second
    assert second is not first


def test_create_refuses_running_game() -> None:
    registry = SessionRegistry()
    session = registry.create(100, _alice())
    session.phase = Phase.ROUND_ACTIVE

    with pytest.raises(GameRejection) as exc_info:
        registry.create(100, _alice())

    assert exc_info.value.reason is RejectionReason.SESSION_ALREADY_ACTIVE
    assert registry.get(100) is session


def test_remove_marks_session_ended() -> None:
    registry = SessionRegistry()
    session = registry.create(100, _alice())

    assert registry.remove(100) is session
    assert session.phase is Phase.ENDED
    assert registry.get(100) is None
    assert registry.remove(100) is None


@pytest.mark.anyio
async def test_lock_serializes_one_chat_only(anyio_backend) -> None:
    registry = SessionRegistry()
    order = []

    async def hold(chat_id, label, release: asyncio.Event) -> None:
        async with registry.lock(chat_id):
            order.append(f"{label} in")
            await release.wait()
            order.append(f"{label} out")

    release = asyncio.Event()
    first = asyncio.create_task(hold(100, "a", release))
    second = asyncio.create_task(hold(100, "b", release))
    other = asyncio.create_task(hold(200, "c", release))
    await settle()
    assert order == ["a in", "c in"]

    release.set()
    await asyncio.gather(first, second, other)
    assert order.index("b in") > order.index("a out")


@pytest.mark.anyio
async def test_locks_of_chats_without_session_are_dropped(anyio_backend) -> None:
    registry = SessionRegistry()

    for chat_id in range(50):
        async with registry.lock(chat_id):
            assert registry.get(chat_id) is None
    assert registry._locks == {}

    async with registry.lock(100):
        registry.create(100, _alice())
    assert 100 in registry._locks

    async with registry.lock(100):
        registry.remove(100)
    assert registry._locks == {}
    assert registry._lock_users == {}


@pytest.mark.anyio
async def test_reset_keeps_held_locks(anyio_backend) -> None:
    registry = SessionRegistry()
    release = asyncio.Event()
    entered = []

    async def holder() -> None:
        async with registry.lock(100):
            registry.create(100, _alice())
            await release.wait()

    async def late() -> None:
        async with registry.lock(100):
            entered.append(True)

    held = asyncio.create_task(holder())
    await settle()
    registry.reset()
    waiting = asyncio.create_task(late())
    await settle()
    assert entered == []

    release.set()
    await asyncio.gather(held, waiting)
    assert entered == [True]
    assert registry._locks == {}


def test_reset_forgets_everything() -> None:
    registry = SessionRegistry()
    first = registry.create(100, _alice())
    registry.create(200, _alice())

    registry.reset()

    assert len(registry) == 0
    assert registry.chat_ids() == []
    assert first.phase is Phase.ENDED
