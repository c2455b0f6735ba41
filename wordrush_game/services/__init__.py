"""Service layer for Word Rush."""

from .engine import GameEngine, NameResolver, Notifier, SubmissionResult
from .timers import TimerManager
from .validator import record_submission, validate_submission
from .word_cache import Dictionary, WordCache

__all__ = [
    "Dictionary",
    "GameEngine",
    "NameResolver",
    "Notifier",
    "SubmissionResult",
    "TimerManager",
    "WordCache",
    "record_submission",
    "validate_submission",
]
