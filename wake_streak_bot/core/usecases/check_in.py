"""Daily wake-up check-in: on-time/late evaluation and streak bookkeeping."""

from __future__ import annotations

import datetime as dt
from dataclasses import replace

from wake_streak_bot.core.entities.checkin_outcome import CheckInOutcome, CheckInStatus
from wake_streak_bot.core.entities.user_record import UserRecord
from wake_streak_bot.core.interfaces.repositories.user_repo import AbstractUserRecordStore
from wake_streak_bot.utils import timeutils


class NotRegistered(Exception):
    pass


def evaluate(record: UserRecord, now: dt.datetime) -> tuple[CheckInOutcome, UserRecord]:
    """Evaluate a check-in made at ``now`` (wall-clock time in the user's zone).

    Pure: ``record`` is left untouched and the returned record is a copy with
    the new streak, last success date and log history applied. When the user
    already succeeded today the input record is returned as is.
    """
    today = now.date()
    yesterday = today - dt.timedelta(days=1)
    last_day = record.last_success_date

    if last_day == today:
        outcome = CheckInOutcome(
            status=CheckInStatus.ON_TIME,
            timestamp=now,
            new_streak=record.streak,
            already_checked_in_today=True,
        )
        return outcome, record

    on_time = timeutils.in_wake_window(timeutils.to_minutes(now), timeutils.to_minutes(record.wake))

    streak = record.streak
    reset = False
    if on_time:
        streak = streak + 1 if last_day == yesterday else 1
        last_day = today
    elif last_day is not None and last_day != yesterday:
        # at least one whole day without an on-time check-in
        streak = 0
        last_day = None
        reset = True

    status = CheckInStatus.ON_TIME if on_time else CheckInStatus.LATE
    entry = f"{today.isoformat()} – {timeutils.format_hhmm(now)} – {status.label}"
    updated = replace(
        record,
        streak=streak,
        last_success_date=last_day,
        log_history=record.with_log_entry(entry),
    )
    outcome = CheckInOutcome(status=status, timestamp=now, new_streak=streak, reset_occurred=reset)
    return outcome, updated


def execute(
    user_id: str,
    store: AbstractUserRecordStore,
    now: dt.datetime | None = None,
) -> tuple[CheckInOutcome, UserRecord]:
    """Run a check-in for ``user_id`` and persist the result with a single upsert."""
    record = store.get(user_id)
    if record is None:
        raise NotRegistered("You need to register first.")

    local_now = timeutils.now_in_zone(record.timezone, now)
    outcome, updated = evaluate(record, local_now)
    if outcome.already_checked_in_today:
        return outcome, record

    stored = store.upsert(user_id, lambda _current: updated)
    return outcome, stored
