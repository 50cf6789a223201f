"""Per-user wake schedule and streak state."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field

MAX_LOG_ENTRIES = 5


@dataclass(slots=True)
class UserRecord:
    wake: dt.time
    sleep: dt.time  # informational only
    timezone: str  # IANA zone name
    streak: int = 0
    last_success_date: dt.date | None = None  # in the user's zone
    log_history: list[str] = field(default_factory=list)  # most recent first

    def with_log_entry(self, entry: str) -> list[str]:
        """Return the history with ``entry`` prepended, bounded to MAX_LOG_ENTRIES."""
        return [entry, *self.log_history][:MAX_LOG_ENTRIES]
