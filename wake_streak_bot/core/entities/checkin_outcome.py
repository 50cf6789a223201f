"""Result of a single check-in attempt."""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass


class CheckInStatus(enum.Enum):
    ON_TIME = "On Time"
    LATE = "Late"

    @property
    def label(self) -> str:
        return f"✅ {self.value}" if self is CheckInStatus.ON_TIME else f"❌ {self.value}"


@dataclass(slots=True, frozen=True)
class CheckInOutcome:
    status: CheckInStatus
    timestamp: dt.datetime  # aware, in the user's zone
    new_streak: int
    reset_occurred: bool = False
    already_checked_in_today: bool = False
