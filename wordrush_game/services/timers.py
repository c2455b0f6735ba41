"""Cancellable per-chat timers backed by asyncio tasks."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from ..state.models import ChatId

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], Awaitable[None]]
SleepFunc = Callable[[float], Awaitable[None]]


class TimerManager:
    """Own at most one pending delayed callback per chat.

    ``schedule`` cancels and replaces whatever the chat had pending.  A task
    stays registered while its callback runs, so ``cancel`` from another
    task also stops a callback that is still waiting for the chat lock.  A
    callback may reschedule or cancel its own chat without cancelling
    itself.
    """

    def __init__(self, sleep: Optional[SleepFunc] = None) -> None:
        self._sleep: SleepFunc = sleep or asyncio.sleep
        self._tasks: Dict[ChatId, asyncio.Task[None]] = {}

    def schedule(self, chat_id: ChatId, delay: float, callback: TimerCallback) -> asyncio.Task[None]:
        self.cancel(chat_id)
        task = asyncio.get_running_loop().create_task(
            self._run(chat_id, delay, callback), name=f"wordrush_timer_{chat_id}"
        )

        def _cleanup(completed: asyncio.Task[None]) -> None:
            if self._tasks.get(chat_id) is completed:
                self._tasks.pop(chat_id, None)

        task.add_done_callback(_cleanup)
        self._tasks[chat_id] = task
        logger.debug("Scheduled timer for %s in %.1fs", chat_id, delay)
        return task

    def cancel(self, chat_id: ChatId) -> bool:
        """Forget the pending timer of ``chat_id``; return whether one existed."""

        task = self._tasks.pop(chat_id, None)
        if task is None:
            return False
        if task is not asyncio.current_task() and not task.done():
            task.cancel()
            logger.debug("Cancelled timer for %s", chat_id)
        return True

    def cancel_all(self) -> None:
        for chat_id in list(self._tasks):
            self.cancel(chat_id)

    def is_pending(self, chat_id: ChatId) -> bool:
        task = self._tasks.get(chat_id)
        return task is not None and not task.done()

    async def _run(self, chat_id: ChatId, delay: float, callback: TimerCallback) -> None:
        try:
            await self._sleep(delay)
            await callback()
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Timer callback failed for chat %s", chat_id)

    def __len__(self) -> int:
        return len(self._tasks)


__all__ = ["TimerCallback", "TimerManager"]
