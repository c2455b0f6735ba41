"""Tests for the ordered submission checks."""

from __future__ import annotations

import pytest

from wordrush_game import GameSession, Phase, PlayerState, RejectionReason
from wordrush_game.services import record_submission, validate_submission


@pytest.fixture
def session() -> GameSession:
    session = GameSession(
        chat_id=100,
        phase=Phase.ROUND_ACTIVE,
        round=2,
        min_word_length=4,
        current_letter="B",
    )
    session.add_player(PlayerState(user_id=1, name="Alice"))
    session.add_player(PlayerState(user_id=2, name="Bob"))
    session.add_player(PlayerState(user_id=3, name="Carol"))
    return session


def test_valid_word_passes(session: GameSession) -> None:
    assert validate_submission(session, 1, "bread") is None
    assert validate_submission(session, 1, "Bread", word_exists=True) is None


@pytest.mark.parametrize(
    ("player_id", "word", "reason"),
    [
        (4, "bread", RejectionReason.NOT_A_PLAYER),
        (1, "", RejectionReason.INVALID_FORMAT),
        (1, "bre ad", RejectionReason.INVALID_FORMAT),
        (1, "bread\n", RejectionReason.INVALID_FORMAT),
        (1, "brè", RejectionReason.INVALID_FORMAT),
        (1, "bee", RejectionReason.TOO_SHORT),
        (1, "apple", RejectionReason.WRONG_LETTER),
    ],
)
def test_pre_lookup_rejections(session: GameSession, player_id: int, word: str, reason) -> None:
    assert validate_submission(session, player_id, word) is reason


def test_no_active_round(session: GameSession) -> None:
    assert validate_submission(None, 1, "bread") is RejectionReason.NO_ACTIVE_ROUND
    session.phase = Phase.LOBBY
    assert validate_submission(session, 1, "bread") is RejectionReason.NO_ACTIVE_ROUND
    session.phase = Phase.ROUND_RESOLVING
    assert validate_submission(session, 1, "bread") is RejectionReason.NO_ACTIVE_ROUND


def test_round_changed_during_lookup(session: GameSession) -> None:
    reason = validate_submission(session, 1, "bread", word_exists=True, expected_round=1)

    assert reason is RejectionReason.NO_ACTIVE_ROUND


def test_checks_run_in_order(session: GameSession) -> None:
    session.responses[1] = "bulb"
    # Already submitted beats the bad format and letter.
    assert validate_submission(session, 1, "42") is RejectionReason.ALREADY_SUBMITTED
    # Format beats length.
    assert validate_submission(session, 2, "b1") is RejectionReason.INVALID_FORMAT
    # Length beats letter.
    assert validate_submission(session, 2, "ant") is RejectionReason.TOO_SHORT
    # Dictionary beats reuse.
    session.game_used_words.add("bread")
    assert validate_submission(session, 2, "bread", word_exists=False) is RejectionReason.NOT_A_WORD


def test_word_used_earlier_in_game(session: GameSession) -> None:
    session.game_used_words.add("bread")

    reason = validate_submission(session, 2, "BREAD", word_exists=True)

    assert reason is RejectionReason.ALREADY_USED_IN_GAME


def test_word_used_in_this_round(session: GameSession) -> None:
    session.round_used_words.add("bread")

    reason = validate_submission(session, 2, "bread", word_exists=True)

    assert reason is RejectionReason.ALREADY_USED_IN_ROUND


def test_validation_does_not_mutate(session: GameSession) -> None:
    validate_submission(session, 2, "bread", word_exists=False)

    assert session.responses == {}
    assert session.round_used_words == set()
    assert session.game_used_words == set()


def test_record_submission(session: GameSession) -> None:
    record_submission(session, 2, "Bread")

    assert session.responses == {2: "Bread"}
    assert session.round_used_words == {"bread"}
    assert session.game_used_words == {"bread"}
    assert validate_submission(session, 3, "bread", word_exists=True) is RejectionReason.ALREADY_USED_IN_GAME
