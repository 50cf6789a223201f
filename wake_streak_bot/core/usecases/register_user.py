"""Use case for registering or updating a user's wake schedule."""

from __future__ import annotations

from wake_streak_bot.core.entities.user_record import UserRecord
from wake_streak_bot.core.interfaces.repositories.user_repo import AbstractUserRecordStore
from wake_streak_bot.utils import timeutils


class InvalidSchedule(ValueError):
    pass


def execute(
    user_id: str,
    wake: str,
    sleep: str,
    timezone: str,
    store: AbstractUserRecordStore,
) -> tuple[UserRecord, bool]:
    """Create the user or overwrite their schedule. Returns (record, created).

    Streak, last success date and log history of an existing user are kept.
    """
    try:
        wake_time = timeutils.parse_hhmm(wake)
        sleep_time = timeutils.parse_hhmm(sleep)
    except ValueError as exc:
        raise InvalidSchedule(str(exc)) from exc

    timezone = timezone.strip()
    if not timeutils.is_valid_timezone(timezone):
        raise InvalidSchedule(f"Invalid timezone {timezone!r}. Use an IANA name like Asia/Ho_Chi_Minh.")

    created = store.get(user_id) is None

    def _apply(record: UserRecord | None) -> UserRecord:
        if record is None:
            return UserRecord(wake=wake_time, sleep=sleep_time, timezone=timezone)
        record.wake = wake_time
        record.sleep = sleep_time
        record.timezone = timezone
        return record

    return store.upsert(user_id, _apply), created
