"""Round parameters and lifecycle transitions for Word Rush."""

from __future__ import annotations

import random
import string
from dataclasses import dataclass
from typing import List, Optional

from ..errors import InvariantViolation
from .models import Difficulty, GameSession, Phase, PlayerState

BASE_TIME = {Difficulty.EASY: 45, Difficulty.MEDIUM: 40, Difficulty.HARD: 35}
TIME_DECREMENT = {Difficulty.EASY: 3, Difficulty.MEDIUM: 4, Difficulty.HARD: 5}
MIN_TIME_LIMIT = 15
BASE_WORD_LENGTH = 3
LETTERS = string.ascii_uppercase


@dataclass(frozen=True, slots=True)
class RoundParameters:
    time_limit: int
    min_word_length: int


@dataclass(slots=True)
class RoundOutcome:
    """Result of resolving a round (or of a forfeit) for announcements."""

    round: int
    eliminated: List[PlayerState]
    remaining: List[PlayerState]

    @property
    def game_over(self) -> bool:
        return len(self.remaining) <= 1

    @property
    def winner(self) -> Optional[PlayerState]:
        return self.remaining[0] if len(self.remaining) == 1 else None


def round_parameters(difficulty: Difficulty, round_number: int) -> RoundParameters:
    """Return the time limit and minimum word length for a 1-based round."""

    if round_number < 1:
        raise ValueError(f"round numbers start at 1, got {round_number}")
    elapsed = round_number - 1
    time_limit = max(MIN_TIME_LIMIT, BASE_TIME[difficulty] - elapsed * TIME_DECREMENT[difficulty])
    return RoundParameters(time_limit=time_limit, min_word_length=BASE_WORD_LENGTH + elapsed // 2)


def random_letter(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(LETTERS)


def begin_round(session: GameSession, rng: Optional[random.Random] = None) -> RoundParameters:
    """Move the session into a fresh ``ROUND_ACTIVE`` round."""

    if session.phase not in (Phase.LOBBY, Phase.ROUND_RESOLVING):
        raise InvariantViolation(
            f"cannot start a round for chat {session.chat_id} in phase {session.phase.value}"
        )
    session.round += 1
    params = round_parameters(session.difficulty, session.round)
    session.time_limit = params.time_limit
    session.min_word_length = params.min_word_length
    session.current_letter = random_letter(rng)
    session.responses = {}
    session.round_used_words = set()
    session.resolution_claimed = False
    session.phase = Phase.ROUND_ACTIVE
    return params


def resolve_round(session: GameSession) -> RoundOutcome:
    """Eliminate every player without a response.

    Must only be called by the holder of the round's resolution guard.
    """

    if session.phase is not Phase.ROUND_RESOLVING:
        raise InvariantViolation(
            f"round {session.round} of chat {session.chat_id} resolved without the guard"
        )
    eliminated = [p for p in session.players if p.user_id not in session.responses]
    session.players = [p for p in session.players if p.user_id in session.responses]
    return settle(session, eliminated)


def settle(session: GameSession, eliminated: List[PlayerState]) -> RoundOutcome:
    """Apply the zero/one/many remaining players decision."""

    outcome = RoundOutcome(round=session.round, eliminated=eliminated, remaining=list(session.players))
    if outcome.game_over:
        session.phase = Phase.ENDED
    else:
        session.phase = Phase.ROUND_RESOLVING
    return outcome


__all__ = [
    "BASE_TIME",
    "MIN_TIME_LIMIT",
    "RoundOutcome",
    "RoundParameters",
    "TIME_DECREMENT",
    "begin_round",
    "random_letter",
    "resolve_round",
    "round_parameters",
    "settle",
]
