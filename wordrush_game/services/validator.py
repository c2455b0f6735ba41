"""Submission checks for a running Word Rush round."""

from __future__ import annotations

import re
from typing import Optional

from ..errors import RejectionReason
from ..state.models import GameSession, Phase, UserId

WORD_PATTERN = re.compile(r"[A-Za-z]+")


def validate_submission(
    session: Optional[GameSession],
    player_id: UserId,
    raw_word: str,
    *,
    word_exists: Optional[bool] = None,
    expected_round: Optional[int] = None,
) -> Optional[RejectionReason]:
    """Return why ``raw_word`` cannot be accepted, or ``None`` if it can.

    Checks run in a fixed order and the first failure wins.  The dictionary
    check only runs when ``word_exists`` is known, which lets the engine
    pre-check a word before the lookup and re-check it afterwards.  When
    ``expected_round`` is given, a session that has moved on to another
    round counts as having no active round.
    """

    if session is None or session.phase is not Phase.ROUND_ACTIVE:
        return RejectionReason.NO_ACTIVE_ROUND
    if expected_round is not None and session.round != expected_round:
        return RejectionReason.NO_ACTIVE_ROUND
    if not session.has_player(player_id):
        return RejectionReason.NOT_A_PLAYER
    if player_id in session.responses:
        return RejectionReason.ALREADY_SUBMITTED
    if not raw_word or not WORD_PATTERN.fullmatch(raw_word):
        return RejectionReason.INVALID_FORMAT
    if len(raw_word) < session.min_word_length:
        return RejectionReason.TOO_SHORT
    if not session.current_letter or raw_word[0].upper() != session.current_letter.upper():
        return RejectionReason.WRONG_LETTER
    if word_exists is None:
        return None
    if not word_exists:
        return RejectionReason.NOT_A_WORD
    lowered = raw_word.lower()
    if lowered in session.game_used_words:
        return RejectionReason.ALREADY_USED_IN_GAME
    if lowered in session.round_used_words:
        return RejectionReason.ALREADY_USED_IN_ROUND
    return None


def record_submission(session: GameSession, player_id: UserId, raw_word: str) -> None:
    """Store an accepted word; call only after a clean full validation."""

    lowered = raw_word.lower()
    session.responses[player_id] = raw_word
    session.round_used_words.add(lowered)
    session.game_used_words.add(lowered)


__all__ = ["WORD_PATTERN", "record_submission", "validate_submission"]
