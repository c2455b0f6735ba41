"""State management primitives for Word Rush."""

from .models import Difficulty, GameSession, Phase, PlayerState
from .registry import SessionRegistry
from .rules import RoundOutcome, RoundParameters, round_parameters

__all__ = [
    "Difficulty",
    "GameSession",
    "Phase",
    "PlayerState",
    "RoundOutcome",
    "RoundParameters",
    "SessionRegistry",
    "round_parameters",
]
