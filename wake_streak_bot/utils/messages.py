"""Reply texts for the chat commands."""

from __future__ import annotations

from typing import Sequence

from wake_streak_bot.core.entities.checkin_outcome import CheckInOutcome
from wake_streak_bot.core.entities.user_record import UserRecord
from wake_streak_bot.utils.timeutils import format_hhmm

REGISTER_USAGE = "⚠️ Usage: <code>/register wake HH:MM sleep HH:MM timezone Region/City</code>"
NOT_REGISTERED = (
    "❌ You need to register first with "
    "<code>/register wake HH:MM sleep HH:MM timezone Region/City</code>."
)
ALREADY_CHECKED_IN = "⏰ Already checked in today!"
STREAK_RESET = "⚠️ You missed a day. Streak reset to 0."
NO_STREAKS = "📉 No active streaks yet!"
GROUP_ONLY = "❌ Leaderboard works only in a group."


def build_registered_text(record: UserRecord, created: bool) -> str:
    lines = [
        "✅ Registered!" if created else "✅ Schedule updated!",
        f"• Wake: {format_hhmm(record.wake)}",
        f"• Sleep: {format_hhmm(record.sleep)}",
        f"• TZ: {record.timezone}",
    ]
    if not created:
        lines.append(f"• Streak: {record.streak} days")
    return "\n".join(lines)


def build_checkin_text(outcome: CheckInOutcome) -> str:
    return (
        f"{outcome.status.label} – Logged at {format_hhmm(outcome.timestamp)}\n"
        f"Current streak: {outcome.new_streak}"
    )


def build_profile_text(record: UserRecord, badge: str | None = None) -> str:
    if record.log_history:
        logs = "\n".join(f"#{i}: {entry}" for i, entry in enumerate(record.log_history, start=1))
    else:
        logs = "No logs yet."

    lines = [
        "📊 <b>Your Profile</b>",
        f"• Wake: {format_hhmm(record.wake)}",
        f"• Sleep: {format_hhmm(record.sleep)}",
        f"• Streak: {record.streak} days",
    ]
    if badge:
        lines.append(f"• Badge: {badge}")
    lines.append(f"• Recent:\n{logs}")
    return "\n".join(lines)


def build_leaderboard_text(entries: Sequence[tuple[str, int]]) -> str:
    if not entries:
        return NO_STREAKS
    board = [f"<b>{i}.</b> {name} – 🔥 {streak}" for i, (name, streak) in enumerate(entries, start=1)]
    return "🏆 Top Wake Streaks:\n" + "\n".join(board)
