"""Use case listing the longest active streaks."""

from __future__ import annotations

from typing import List, Tuple

from wake_streak_bot.core.interfaces.repositories.user_repo import AbstractUserRecordStore

DEFAULT_LIMIT = 10


def execute(store: AbstractUserRecordStore, limit: int = DEFAULT_LIMIT) -> List[Tuple[str, int]]:
    """Return (user_id, streak) for users with a positive streak, longest first."""
    entries = [(user_id, record.streak) for user_id, record in store.list_all() if record.streak > 0]
    entries.sort(key=lambda e: e[1], reverse=True)
    return entries[:limit]
