"""Process-wide memo of dictionary answers."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class Dictionary(Protocol):
    def is_valid_word(self, word: str) -> Awaitable[bool]: ...


class WordCache:
    """Cache ``Dictionary.is_valid_word`` answers per lowercase word.

    Concurrent lookups of the same word share one oracle call.  Failed
    lookups count as "not a word" for the caller but are not memoized.
    """

    def __init__(self, dictionary: Dictionary) -> None:
        self._dictionary = dictionary
        self._answers: Dict[str, bool] = {}
        self._pending: Dict[str, asyncio.Future[bool]] = {}

    def cached(self, word: str) -> Optional[bool]:
        return self._answers.get(word.lower())

    async def is_valid_word(self, word: str) -> bool:
        key = word.lower()
        known = self._answers.get(key)
        if known is not None:
            logger.debug("Word cache hit for %s: %s", key, known)
            return known
        pending = self._pending.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        try:
            valid = bool(await self._dictionary.is_valid_word(key))
        except asyncio.CancelledError:
            # Waiters sharing this lookup get "not a word"; nothing is memoized.
            future.set_result(False)
            raise
        except Exception:
            logger.warning("Dictionary lookup failed for %s", key, exc_info=True)
            valid = False
        else:
            self._answers[key] = valid
        finally:
            self._pending.pop(key, None)
        future.set_result(valid)
        return valid

    def clear(self) -> None:
        self._answers.clear()

    def __len__(self) -> int:
        return len(self._answers)


__all__ = ["Dictionary", "WordCache"]
