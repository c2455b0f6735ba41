"""Rejections and internal failures raised by the Word Rush engine."""

from __future__ import annotations

from enum import Enum


class RejectionReason(str, Enum):
    """Expected, user-facing reasons why a command was refused."""

    NO_LOBBY = "no_lobby"
    ALREADY_JOINED = "already_joined"
    NOT_ENOUGH_PLAYERS = "not_enough_players"
    NO_ACTIVE_ROUND = "no_active_round"
    NOT_A_PLAYER = "not_a_player"
    ALREADY_SUBMITTED = "already_submitted"
    INVALID_FORMAT = "invalid_format"
    TOO_SHORT = "too_short"
    WRONG_LETTER = "wrong_letter"
    NOT_A_WORD = "not_a_word"
    ALREADY_USED_IN_GAME = "already_used_in_game"
    ALREADY_USED_IN_ROUND = "already_used_in_round"
    SESSION_ALREADY_ACTIVE = "session_already_active"


class GameRejection(Exception):
    """A command was refused for a reason the players should be told about."""

    def __init__(self, reason: RejectionReason, message: str | None = None) -> None:
        super().__init__(message or reason.value)
        self.reason = reason


class InvariantViolation(RuntimeError):
    """Internal state contradicts the session lifecycle. Never shown to players."""


__all__ = ["GameRejection", "InvariantViolation", "RejectionReason"]
