"""Dataclasses describing a Word Rush lobby and running game."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Hashable, List, Optional, Set

ChatId = Hashable
UserId = Hashable


class Phase(str, Enum):
    LOBBY = "lobby"
    ROUND_ACTIVE = "round_active"
    ROUND_RESOLVING = "round_resolving"
    ENDED = "ended"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Difficulty"]:
        """Return the difficulty named by ``value`` or ``None`` if unknown."""

        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class PlayerState:
    """A participant of a Word Rush game."""

    user_id: UserId
    name: str


@dataclass(slots=True)
class GameSession:
    """Snapshot of one chat's lobby and running game."""

    chat_id: ChatId
    difficulty: Difficulty = Difficulty.MEDIUM
    phase: Phase = Phase.LOBBY
    players: List[PlayerState] = field(default_factory=list)
    round: int = 0
    time_limit: int = 0
    min_word_length: int = 3
    current_letter: Optional[str] = None
    responses: Dict[UserId, str] = field(default_factory=dict)
    round_used_words: Set[str] = field(default_factory=set)
    game_used_words: Set[str] = field(default_factory=set)
    resolution_claimed: bool = False
    created_at: datetime = field(default_factory=_utcnow)

    def get_player(self, user_id: UserId) -> Optional[PlayerState]:
        for player in self.players:
            if player.user_id == user_id:
                return player
        return None

    def has_player(self, user_id: UserId) -> bool:
        return self.get_player(user_id) is not None

    def add_player(self, player: PlayerState) -> None:
        """Append ``player`` keeping join order; duplicates are ignored."""

        if not self.has_player(player.user_id):
            self.players.append(player)

    def remove_player(self, user_id: UserId) -> Optional[PlayerState]:
        player = self.get_player(user_id)
        if player is not None:
            self.players.remove(player)
            self.responses.pop(user_id, None)
        return player

    def all_responded(self) -> bool:
        return bool(self.players) and len(self.responses) == len(self.players)

    def claim_resolution(self) -> bool:
        """Take the one-shot resolution guard of the current round.

        Returns ``True`` exactly once per round: the caller that gets it owns
        the transition out of ``ROUND_ACTIVE``; every later caller gets
        ``False`` and must do nothing.
        """

        if self.phase is not Phase.ROUND_ACTIVE or self.resolution_claimed:
            return False
        self.resolution_claimed = True
        self.phase = Phase.ROUND_RESOLVING
        return True
