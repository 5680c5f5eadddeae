"""Simulated typing delay tied to a chat session's lifetime."""
import asyncio
import logging
from typing import Optional, Set

from config import TYPING_DELAY_MAX_SECONDS, TYPING_DELAY_PER_CHAR

logger = logging.getLogger(__name__)


class TypingDelay:
    """
    Cancellable "thinking" pause proportional to reply length.

    Each wait runs as a tracked asyncio task so the owning session can
    cancel every pending wait when it is torn down.
    """

    def __init__(
        self,
        per_char_seconds: float = TYPING_DELAY_PER_CHAR,
        max_seconds: float = TYPING_DELAY_MAX_SECONDS,
        enabled: bool = True
    ):
        self.per_char_seconds = per_char_seconds
        self.max_seconds = max_seconds
        self.enabled = enabled
        self._pending: Set[asyncio.Task] = set()

    def duration(self, reply: str) -> float:
        """Seconds to wait before showing reply."""
        if not self.enabled:
            return 0.0
        return min(len(reply) * self.per_char_seconds, self.max_seconds)

    async def wait(self, reply: str) -> None:
        """
        Pause for the reply's typing duration.

        Raises:
            asyncio.CancelledError: If cancel() is called while waiting
        """
        seconds = self.duration(reply)
        if seconds <= 0:
            return

        task = asyncio.ensure_future(asyncio.sleep(seconds))
        self._pending.add(task)
        try:
            await task
        finally:
            self._pending.discard(task)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def cancel(self) -> int:
        """Cancel all pending waits; returns how many were cancelled."""
        cancelled = 0
        for task in list(self._pending):
            if not task.done():
                task.cancel()
                cancelled += 1
        if cancelled:
            logger.debug(f"Cancelled {cancelled} pending typing delay(s)")
        return cancelled
