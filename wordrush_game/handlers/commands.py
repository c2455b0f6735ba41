"""Map chat verbs to engine operations."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..errors import GameRejection
from ..services import GameEngine
from ..state import Difficulty, Phase
from ..state.models import ChatId, UserId

logger = logging.getLogger(__name__)

LOBBY_VERBS = frozenset({"wordgame", "wg"})
JOIN_VERB = "wjoin"
START_VERB = "wstart"
SUBMIT_VERB = "w"
VERBS = LOBBY_VERBS | {JOIN_VERB, START_VERB, SUBMIT_VERB}


async def dispatch(
    engine: GameEngine,
    chat_id: ChatId,
    sender_id: UserId,
    verb: str,
    args: Sequence[str] = (),
    *,
    origin: Any = None,
) -> bool:
    """Run one parsed command; return ``False`` if the verb is not ours."""

    verb = verb.lower()
    if verb not in VERBS:
        return False
    first = args[0].strip().lower() if args else ""
    try:
        if verb in LOBBY_VERBS:
            await _lobby_command(engine, chat_id, sender_id, first, origin)
        elif verb == JOIN_VERB:
            await engine.join(chat_id, sender_id, origin=origin)
        elif verb == START_VERB:
            await engine.start(chat_id, origin=origin)
        else:
            word = args[0] if args else ""
            result = await engine.submit(chat_id, sender_id, word, origin=origin)
            if not result.accepted:
                await engine.report_rejection(
                    chat_id, result.reason, player_id=sender_id, word=result.word, origin=origin
                )
    except GameRejection as exc:
        await engine.report_rejection(chat_id, exc.reason, player_id=sender_id, origin=origin)
    except Exception:
        logger.exception("Error in wordgame command %s for %s", verb, chat_id)
        await engine.report_failure(chat_id, origin=origin)
    return True


async def _lobby_command(
    engine: GameEngine, chat_id: ChatId, sender_id: UserId, first: str, origin: Any
) -> None:
    if first == "forfeit":
        await engine.forfeit(chat_id, sender_id, origin=origin)
        return
    if first == "end":
        await engine.end(chat_id, sender_id, origin=origin)
        return
    difficulty: Optional[Difficulty] = Difficulty.parse(first)
    session = engine.get_session(chat_id)
    if difficulty is not None and session is not None and session.phase is Phase.LOBBY:
        await engine.set_difficulty(chat_id, difficulty, origin=origin)
        return
    await engine.start_lobby(chat_id, sender_id, difficulty, origin=origin)


__all__ = ["VERBS", "dispatch"]
