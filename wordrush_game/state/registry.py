"""In-memory registry of Word Rush sessions, one per chat."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from ..errors import GameRejection, RejectionReason
from .models import ChatId, Difficulty, GameSession, Phase, PlayerState

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Single source of truth for "is there a game running in this chat".

    Mutations of one chat's session must happen while holding
    :meth:`lock` for that chat; sessions of different chats never share a
    lock.
    """

    def __init__(self) -> None:
        self._sessions: Dict[ChatId, GameSession] = {}
        self._locks: Dict[ChatId, asyncio.Lock] = {}
        self._lock_users: Dict[ChatId, int] = {}

    @asynccontextmanager
    async def lock(self, chat_id: ChatId) -> AsyncIterator[None]:
        """Serialize commands and timers of ``chat_id``.

        A chat's lock lives while a session exists or someone holds or waits
        for it, so chats without a game leave nothing behind.
        """

        lock = self._locks.get(chat_id)
        if lock is None:
            lock = self._locks[chat_id] = asyncio.Lock()
        self._lock_users[chat_id] = self._lock_users.get(chat_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            users = self._lock_users[chat_id] - 1
            if users:
                self._lock_users[chat_id] = users
            else:
                del self._lock_users[chat_id]
                if chat_id not in self._sessions:
                    self._locks.pop(chat_id, None)

    def get(self, chat_id: ChatId) -> Optional[GameSession]:
        return self._sessions.get(chat_id)

    def create(
        self,
        chat_id: ChatId,
        initial_player: PlayerState,
        difficulty: Difficulty = Difficulty.MEDIUM,
    ) -> GameSession:
        """Open a lobby for ``chat_id``, replacing a lobby that is still open."""

        existing = self._sessions.get(chat_id)
        if existing is not None and existing.phase is not Phase.LOBBY:
            raise GameRejection(RejectionReason.SESSION_ALREADY_ACTIVE)
        if existing is not None:
            logger.info("Replacing open Word Rush lobby in %s", chat_id)
        session = GameSession(chat_id=chat_id, difficulty=difficulty)
        session.add_player(initial_player)
        self._sessions[chat_id] = session
        return session

    def remove(self, chat_id: ChatId) -> Optional[GameSession]:
        session = self._sessions.pop(chat_id, None)
        if session is not None:
            session.phase = Phase.ENDED
        if chat_id not in self._lock_users:
            self._locks.pop(chat_id, None)
        return session

    def chat_ids(self) -> List[ChatId]:
        return list(self._sessions)

    def reset(self) -> None:
        """Forget every session (used on shutdown and in tests).

        Locks still held or awaited are kept so late handlers keep queueing
        behind them; they go away once released.
        """

        for session in self._sessions.values():
            session.phase = Phase.ENDED
        self._sessions.clear()
        self._locks = {
            chat_id: lock for chat_id, lock in self._locks.items() if chat_id in self._lock_users
        }

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._sessions


__all__ = ["SessionRegistry"]
