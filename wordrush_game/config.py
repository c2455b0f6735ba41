"""Engine settings read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .state.models import Difficulty

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GameSettings:
    min_players: int = 2
    next_round_delay: float = 3.0
    default_difficulty: Difficulty = Difficulty.MEDIUM

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GameSettings":
        env = os.environ if environ is None else environ
        defaults = cls()

        difficulty = defaults.default_difficulty
        raw_difficulty = env.get("WORDRUSH_DEFAULT_DIFFICULTY")
        if raw_difficulty:
            parsed = Difficulty.parse(raw_difficulty)
            if parsed is None:
                logger.warning("Ignoring unknown WORDRUSH_DEFAULT_DIFFICULTY=%r", raw_difficulty)
            else:
                difficulty = parsed

        return cls(
            min_players=_read_number(env, "WORDRUSH_MIN_PLAYERS", defaults.min_players, int, minimum=2),
            next_round_delay=_read_number(
                env, "WORDRUSH_NEXT_ROUND_DELAY", defaults.next_round_delay, float, minimum=0
            ),
            default_difficulty=difficulty,
        )


def _read_number(env: Mapping[str, str], name: str, default, cast, *, minimum):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return default
    if value < minimum:
        logger.warning("Ignoring %s=%r below %s", name, raw, minimum)
        return default
    return value


__all__ = ["GameSettings"]
