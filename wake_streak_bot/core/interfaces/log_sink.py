"""Interface for the external append-only check-in log."""

from __future__ import annotations

import abc
from typing import Protocol, Sequence


class AbstractCheckInLogSink(Protocol):
    """Appends one row per check-in. No deduplication is expected of the sink."""

    @abc.abstractmethod
    async def append_row(self, row: Sequence[str]) -> None: ...
