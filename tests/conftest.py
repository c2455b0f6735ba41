"""Shared fixtures and fake collaborators for the Word Rush tests."""

from __future__ import annotations

import asyncio
import random
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from wordrush_game import GameEngine, GameSettings, TimerManager


class FakeNotifier:
    def __init__(self) -> None:
        self.texts: List[Tuple[object, str, list]] = []
        self.reactions: List[Tuple[object, str]] = []
        self.fail = False

    async def send_text(self, chat_id, text, mentioned_ids=()) -> None:
        if self.fail:
            raise RuntimeError("chat is down")
        self.texts.append((chat_id, text, list(mentioned_ids)))

    async def send_reaction(self, origin, emoji) -> None:
        if self.fail:
            raise RuntimeError("chat is down")
        self.reactions.append((origin, emoji))

    def messages_for(self, chat_id) -> List[str]:
        return [text for cid, text, _ in self.texts if cid == chat_id]


class FakeDictionary:
    def __init__(self, words: Iterable[str] = (), failing: Iterable[str] = ()) -> None:
        self.words = {word.lower() for word in words}
        self.failing = {word.lower() for word in failing}
        self.calls: List[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def is_valid_word(self, word: str) -> bool:
        self.calls.append(word)
        if self.gate is not None:
            await self.gate.wait()
        if word in self.failing:
            raise ConnectionError("dictionary offline")
        return word in self.words


class FakeNames:
    def __init__(self, names: Optional[Dict[object, str]] = None) -> None:
        self.names = dict(names or {})

    async def resolve(self, user_id) -> str:
        if user_id not in self.names:
            raise LookupError(user_id)
        return self.names[user_id]


class ManualClock:
    """Fake sleep for TimerManager; time only moves on ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._sleepers: List[Tuple[float, asyncio.Future]] = []

    async def sleep(self, delay: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self._sleepers.append((self.now + delay, future))
        await future

    async def advance(self, seconds: float) -> None:
        await settle()
        self.now += seconds
        for deadline, future in list(self._sleepers):
            if deadline <= self.now:
                self._sleepers.remove((deadline, future))
                if not future.done():
                    future.set_result(None)
        await settle()


async def settle(rounds: int = 20) -> None:
    """Let pending tasks run until the loop is quiet."""

    for _ in range(rounds):
        await asyncio.sleep(0)


WORDS = [
    "apple", "ant", "arm", "bat", "bee", "cat", "car", "cow", "dog", "den",
    "eel", "egg", "fox", "fig", "gum", "hat", "ink", "jam", "kit", "log",
    "map", "net", "owl", "pig", "queen", "rat", "sun", "top", "urn", "van",
    "web", "xray", "yak", "zoo", "acorn", "bread", "cider", "dunes",
]


@pytest.fixture
def anyio_backend() -> str:
    """Engine timers are asyncio tasks, so run AnyIO tests on asyncio only."""

    return "asyncio"


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def dictionary() -> FakeDictionary:
    return FakeDictionary(WORDS)


@pytest.fixture
def names() -> FakeNames:
    return FakeNames({1: "Alice", 2: "Bob", 3: "Carol", 4: "Dave"})


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
async def engine(anyio_backend, notifier, dictionary, names, clock):
    game_engine = GameEngine(
        notifier,
        dictionary,
        names,
        timers=TimerManager(sleep=clock.sleep),
        settings=GameSettings(next_round_delay=3),
        rng=random.Random(7),
    )
    yield game_engine
    game_engine.shutdown()
    await settle()
