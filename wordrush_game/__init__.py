"""Word Rush: a timed, letter-based elimination word game for group chats."""

from .config import GameSettings
from .errors import GameRejection, InvariantViolation, RejectionReason
from .handlers import TelegramNameResolver, TelegramNotifier, dispatch, register_handlers
from .services import GameEngine, SubmissionResult, TimerManager, WordCache
from .state import Difficulty, GameSession, Phase, PlayerState, SessionRegistry, round_parameters

__all__ = [
    "Difficulty",
    "GameEngine",
    "GameRejection",
    "GameSession",
    "GameSettings",
    "InvariantViolation",
    "Phase",
    "PlayerState",
    "RejectionReason",
    "SessionRegistry",
    "SubmissionResult",
    "TelegramNameResolver",
    "TelegramNotifier",
    "TimerManager",
    "WordCache",
    "dispatch",
    "register_handlers",
    "round_parameters",
]
