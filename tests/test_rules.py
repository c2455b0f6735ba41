"""Unit tests for round parameters and lifecycle transitions."""

from __future__ import annotations

import random

import pytest

from wordrush_game import Difficulty, GameSession, InvariantViolation, Phase, PlayerState
from wordrush_game.state import rules


def _session(*player_ids: int, phase: Phase = Phase.LOBBY) -> GameSession:
    session = GameSession(chat_id=100, phase=phase)
    for player_id in player_ids:
        session.add_player(PlayerState(user_id=player_id, name=f"P{player_id}"))
    return session


def test_round_parameters_follow_difficulty_table() -> None:
    assert rules.round_parameters(Difficulty.EASY, 1) == rules.RoundParameters(45, 3)
    assert rules.round_parameters(Difficulty.EASY, 3) == rules.RoundParameters(39, 4)
    assert rules.round_parameters(Difficulty.MEDIUM, 2) == rules.RoundParameters(36, 3)
    assert rules.round_parameters(Difficulty.HARD, 5) == rules.RoundParameters(15, 5)


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_rounds_get_shorter_and_words_longer(difficulty: Difficulty) -> None:
    params = [rules.round_parameters(difficulty, n) for n in range(1, 40)]

    for earlier, later in zip(params, params[1:]):
        assert later.time_limit <= earlier.time_limit
        assert later.min_word_length >= earlier.min_word_length
    assert all(p.time_limit >= rules.MIN_TIME_LIMIT for p in params)
    assert params[-1].time_limit == rules.MIN_TIME_LIMIT


def test_round_parameters_reject_round_zero() -> None:
    with pytest.raises(ValueError):
        rules.round_parameters(Difficulty.MEDIUM, 0)


def test_begin_round_resets_round_state() -> None:
    session = _session(1, 2)
    session.responses = {1: "apple"}
    session.round_used_words = {"apple"}
    session.game_used_words = {"apple"}
    session.resolution_claimed = True

    params = rules.begin_round(session, random.Random(3))

    assert session.phase is Phase.ROUND_ACTIVE
    assert session.round == 1
    assert params == rules.RoundParameters(40, 3)
    assert session.time_limit == 40
    assert session.current_letter in rules.LETTERS
    assert session.responses == {}
    assert session.round_used_words == set()
    assert session.game_used_words == {"apple"}
    assert session.resolution_claimed is False


def test_begin_round_refuses_an_active_round() -> None:
    session = _session(1, 2, phase=Phase.ROUND_ACTIVE)

    with pytest.raises(InvariantViolation):
        rules.begin_round(session)


def test_resolve_round_requires_the_guard() -> None:
    session = _session(1, 2)
    rules.begin_round(session)

    with pytest.raises(InvariantViolation):
        rules.resolve_round(session)


def test_claim_resolution_succeeds_once_per_round() -> None:
    session = _session(1, 2)
    rules.begin_round(session)

    assert session.claim_resolution() is True
    assert session.claim_resolution() is False
    assert session.phase is Phase.ROUND_RESOLVING


def test_resolve_round_eliminates_silent_players() -> None:
    session = _session(1, 2, 3)
    rules.begin_round(session)
    session.responses = {1: "apple", 3: "acorn"}
    session.claim_resolution()

    outcome = rules.resolve_round(session)

    assert [p.user_id for p in outcome.eliminated] == [2]
    assert [p.user_id for p in outcome.remaining] == [1, 3]
    assert [p.user_id for p in session.players] == [1, 3]
    assert not outcome.game_over
    assert outcome.winner is None
    assert session.phase is Phase.ROUND_RESOLVING


def test_resolve_round_single_survivor_wins() -> None:
    session = _session(1, 2)
    rules.begin_round(session)
    session.responses = {2: "bee"}
    session.claim_resolution()

    outcome = rules.resolve_round(session)

    assert outcome.game_over
    assert outcome.winner.user_id == 2
    assert session.phase is Phase.ENDED


def test_resolve_round_without_answers_has_no_winner() -> None:
    session = _session(1, 2)
    rules.begin_round(session)
    session.claim_resolution()

    outcome = rules.resolve_round(session)

    assert outcome.game_over
    assert outcome.winner is None
    assert outcome.remaining == []
    assert session.phase is Phase.ENDED


def test_difficulty_parse() -> None:
    assert Difficulty.parse(" HARD ") is Difficulty.HARD
    assert Difficulty.parse("extreme") is None
    assert Difficulty.parse(None) is None
