"""Best-effort mirroring of check-in outcomes to an external append-only log."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from wake_streak_bot.core.entities.checkin_outcome import CheckInOutcome
from wake_streak_bot.core.interfaces.log_sink import AbstractCheckInLogSink

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
BACKOFF_BASE_MS = 500


def build_row(user_id: str, display_name: str, outcome: CheckInOutcome) -> list[str]:
    ts = outcome.timestamp
    return [
        user_id,
        display_name,
        ts.strftime("%d/%m/%Y"),
        ts.strftime("%H:%M"),
        outcome.status.label,
        str(ts.tzinfo),
    ]


class CheckInLogAppender:
    """Appends one row per check-in, retrying with exponential backoff.

    After ``max_attempts`` failures the row is dropped; nothing is queued for
    later and no exception reaches the caller.
    """

    def __init__(
        self,
        sink: AbstractCheckInLogSink | None,
        max_attempts: int = MAX_ATTEMPTS,
        backoff_base_ms: int = BACKOFF_BASE_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._sink = sink
        self._max_attempts = max_attempts
        self._backoff_base_ms = backoff_base_ms
        self._sleep = sleep

    def backoff_seconds(self, attempt: int) -> float:
        return self._backoff_base_ms * (2 ** attempt) / 1000

    async def append(self, user_id: str, display_name: str, outcome: CheckInOutcome) -> bool:
        """Return True once the sink accepted the row, False if it was dropped."""
        if self._sink is None:
            logger.warning("Check-in log sink unavailable, skipping log for %s", user_id)
            return False

        row = build_row(user_id, display_name, outcome)
        for attempt in range(1, self._max_attempts + 1):
            try:
                await self._sink.append_row(row)
            except Exception as e:
                logger.warning("Check-in log append error (attempt %d): %s", attempt, e)
                if attempt < self._max_attempts:
                    await self._sleep(self.backoff_seconds(attempt))
                continue
            logger.info("Logged check-in of %s to external log", user_id)
            return True

        logger.error("All %d attempts failed for check-in log append of %s", self._max_attempts, user_id)
        return False
