"""Entry point for WakeStreakBot Telegram bot.

Usage:
    export BOT_TOKEN="<your_token>"
    python -m wake_streak_bot.entrypoints.bot_main
"""

from __future__ import annotations

import asyncio
import html
import logging
import re
from dataclasses import dataclass
from typing import Any, Coroutine

from aiogram import Bot, Dispatcher, F, Router
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ChatType, ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import Message

from wake_streak_bot import config
from wake_streak_bot.core.interfaces.log_sink import AbstractCheckInLogSink
from wake_streak_bot.core.usecases import (
    check_in as check_in_uc,
    leaderboard as leaderboard_uc,
    register_user as register_user_uc,
)
from wake_streak_bot.core.usecases.project_badge import DEFAULT_TIERS, BadgeProjector
from wake_streak_bot.dataproviders.checkin_log import CheckInLogAppender
from wake_streak_bot.dataproviders.json_store import JsonUserRecordStore
from wake_streak_bot.dataproviders.membership import InMemoryMembershipGateway
from wake_streak_bot.dataproviders.repositories.sql_log_sink import SqlLogSink
from wake_streak_bot.dataproviders.sheets_sink import SheetsLogSink
from wake_streak_bot.utils import messages

logger = logging.getLogger(__name__)

REGISTER_RE = re.compile(
    r"^/register(?:@\w+)?\s+wake\s+(\d{1,2}:\d{2})\s+sleep\s+(\d{1,2}:\d{2})\s+timezone\s+(\S+)\s*$",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Services:
    store: JsonUserRecordStore
    appender: CheckInLogAppender
    membership: InMemoryMembershipGateway
    projector: BadgeProjector
    log_sink: AbstractCheckInLogSink | None = None

    async def shutdown(self) -> None:
        """Let background side effects finish, flush saves and release the log sink."""
        if _background_tasks:
            await asyncio.gather(*_background_tasks, return_exceptions=True)
        await self.store.flush()
        logger.info("Pending saves flushed")
        if isinstance(self.log_sink, SqlLogSink):
            self.log_sink.dispose()


def build_log_sink() -> AbstractCheckInLogSink | None:
    if config.SHEETS_SPREADSHEET_ID and config.SHEETS_ACCESS_TOKEN:
        logger.info("Check-in log: Google Sheets %s", config.SHEETS_SPREADSHEET_ID)
        return SheetsLogSink(config.SHEETS_SPREADSHEET_ID, config.SHEETS_ACCESS_TOKEN, config.SHEETS_RANGE)
    if config.CHECKIN_LOG_DB_URL:
        logger.info("Check-in log: SQL table")
        return SqlLogSink(config.CHECKIN_LOG_DB_URL)
    logger.warning("No check-in log sink configured")
    return None


def build_services() -> Services:
    store = JsonUserRecordStore(config.USER_DATA_FILE)
    store.load()
    membership = InMemoryMembershipGateway(t.role for t in DEFAULT_TIERS)
    sink = build_log_sink()
    return Services(
        store=store,
        appender=CheckInLogAppender(
            sink,
            max_attempts=config.LOG_MAX_ATTEMPTS,
            backoff_base_ms=config.LOG_BACKOFF_BASE_MS,
        ),
        membership=membership,
        projector=BadgeProjector(membership),
        log_sink=sink,
    )


# Fire-and-forget side effects; references kept until they finish
_background_tasks: set[asyncio.Task[Any]] = set()


def _spawn(coro: Coroutine[Any, Any, Any]) -> None:
    task = asyncio.create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


def _principal(message: Message) -> tuple[int, int]:
    return message.chat.id, message.from_user.id


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

router = Router(name="wake_streak")
router.message.filter(F.from_user, ~F.from_user.is_bot)


@router.message(Command("register"))
async def cmd_register(message: Message, store: JsonUserRecordStore) -> None:
    match = REGISTER_RE.match(message.text or "")
    if not match:
        await message.reply(messages.REGISTER_USAGE)
        return

    wake, sleep, timezone = match.groups()
    try:
        record, created = register_user_uc.execute(str(message.from_user.id), wake, sleep, timezone, store)
    except register_user_uc.InvalidSchedule as exc:
        await message.reply(f"❌ {html.escape(str(exc))}")
        return

    await message.reply(messages.build_registered_text(record, created))


@router.message(Command("wakeup"))
async def cmd_wakeup(
    message: Message,
    store: JsonUserRecordStore,
    appender: CheckInLogAppender,
    projector: BadgeProjector,
) -> None:
    user_id = str(message.from_user.id)
    try:
        outcome, _record = check_in_uc.execute(user_id, store)
    except check_in_uc.NotRegistered:
        await message.reply(messages.NOT_REGISTERED)
        return

    if outcome.already_checked_in_today:
        await message.reply(messages.ALREADY_CHECKED_IN)
        return

    # record is committed; external log and badge run in the background
    display_name = message.from_user.username or message.from_user.full_name
    _spawn(appender.append(user_id, display_name, outcome))
    _spawn(projector.sync(_principal(message), outcome.new_streak))

    if outcome.reset_occurred:
        await message.reply(messages.STREAK_RESET)
    await message.reply(messages.build_checkin_text(outcome))


@router.message(Command("profile"))
async def cmd_profile(message: Message, store: JsonUserRecordStore, membership: InMemoryMembershipGateway) -> None:
    record = store.get(str(message.from_user.id))
    if record is None:
        await message.reply("❌ Not registered yet.")
        return
    await message.reply(messages.build_profile_text(record, membership.badge_of(_principal(message))))


@router.message(Command("top"))
async def cmd_top(message: Message, store: JsonUserRecordStore) -> None:
    if message.chat.type not in (ChatType.GROUP, ChatType.SUPERGROUP):
        await message.reply(messages.GROUP_ONLY)
        return

    entries = leaderboard_uc.execute(store)

    async def _name(user_id: str) -> str:
        try:
            member = await message.bot.get_chat_member(message.chat.id, int(user_id))
            return html.escape(member.user.full_name)
        except (TelegramAPIError, ValueError):
            return f"id {user_id}"

    names = await asyncio.gather(*(_name(uid) for uid, _ in entries))
    board = [(name, streak) for name, (_, streak) in zip(names, entries)]
    await message.reply(messages.build_leaderboard_text(board))


# ---------------------------------------------------------------------------
# Bot & Dispatcher
# ---------------------------------------------------------------------------


def create_bot() -> Bot:
    if not config.BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN env variable not set.")
    return Bot(token=config.BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))


def build_dispatcher(services: Services) -> Dispatcher:
    dp = Dispatcher(
        storage=MemoryStorage(),
        store=services.store,
        appender=services.appender,
        membership=services.membership,
        projector=services.projector,
    )
    dp.include_router(router)

    dp.shutdown.register(services.shutdown)
    return dp


def configure_logging() -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


async def _runner() -> None:
    bot = create_bot()
    dp = build_dispatcher(build_services())
    await dp.start_polling(bot)


def main() -> None:
    configure_logging()
    logger.info("Starting WakeStreakBot...")
    asyncio.run(_runner())


if __name__ == "__main__":
    main()
