import asyncio
import datetime as dt
import logging
from zoneinfo import ZoneInfo

import aiohttp
import pytest
from aiohttp import test_utils, web
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from wake_streak_bot.core.entities.checkin_outcome import CheckInOutcome, CheckInStatus
from wake_streak_bot.dataproviders.checkin_log import CheckInLogAppender, build_row
from wake_streak_bot.dataproviders.repositories._models import CheckInLogModel
from wake_streak_bot.dataproviders.repositories.sql_log_sink import SqlLogSink
from wake_streak_bot.dataproviders.sheets_sink import SheetsLogSink

OUTCOME = CheckInOutcome(
    status=CheckInStatus.ON_TIME,
    timestamp=dt.datetime(2024, 1, 15, 7, 5, tzinfo=ZoneInfo("Asia/Tokyo")),
    new_streak=2,
)
ROW = ["42", "alice", "15/01/2024", "07:05", "✅ On Time", "Asia/Tokyo"]


class FlakySink:
    def __init__(self, failures):
        self.failures = failures
        self.calls = 0
        self.rows = []

    async def append_row(self, row):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError("sheet unreachable")
        self.rows.append(list(row))


class FakeSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def test_build_row_uses_user_zone():
    assert build_row("42", "alice", OUTCOME) == ROW


def test_append_retries_with_exponential_backoff():
    sink, sleep = FlakySink(failures=2), FakeSleep()
    appender = CheckInLogAppender(sink, sleep=sleep)

    assert asyncio.run(appender.append("42", "alice", OUTCOME)) is True
    assert sink.rows == [ROW]
    assert sleep.delays == [1.0, 2.0]


def test_append_gives_up_after_attempt_budget(caplog):
    sink, sleep = FlakySink(failures=100), FakeSleep()
    appender = CheckInLogAppender(sink, max_attempts=5, backoff_base_ms=500, sleep=sleep)

    assert asyncio.run(appender.append("42", "alice", OUTCOME)) is False
    assert sink.calls == 5
    assert sleep.delays == [1.0, 2.0, 4.0, 8.0]
    assert "All 5 attempts failed" in caplog.text


def test_append_without_sink_is_skipped(caplog):
    appender = CheckInLogAppender(None)
    assert asyncio.run(appender.append("42", "alice", OUTCOME)) is False
    assert "sink unavailable" in caplog.text


def _stored_rows(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'log.db'}")
    try:
        with Session(engine) as session:
            models = session.scalars(select(CheckInLogModel).order_by(CheckInLogModel.id)).all()
            return [(m.user_id, m.display_name, m.date, m.time, m.status, m.timezone) for m in models]
    finally:
        engine.dispose()


def test_sql_sink_appends_rows(tmp_path):
    sink = SqlLogSink(f"sqlite:///{tmp_path / 'log.db'}")
    try:
        asyncio.run(sink.append_row(ROW))
        asyncio.run(sink.append_row(ROW))  # no dedup
        assert _stored_rows(tmp_path) == [tuple(ROW), tuple(ROW)]
    finally:
        sink.dispose()


def test_appender_and_sql_sink_together(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    sink = SqlLogSink(f"sqlite:///{tmp_path / 'log.db'}")
    try:
        assert asyncio.run(CheckInLogAppender(sink).append("42", "alice", OUTCOME))
        assert _stored_rows(tmp_path) == [tuple(ROW)]
        assert "Logged check-in of 42" in caplog.text
    finally:
        sink.dispose()


async def _serve_sheets(status, row):
    received = []

    async def handler(request):
        received.append(
            {
                "tail": request.match_info["tail"],
                "option": request.query.get("valueInputOption"),
                "auth": request.headers.get("Authorization"),
                "body": await request.json(),
            }
        )
        return web.json_response({}, status=status)

    app = web.Application()
    app.router.add_post("/spreadsheets/{sid}/values/{tail}", handler)
    async with test_utils.TestServer(app) as server:
        sink = SheetsLogSink("sheet-id", "token", base_url=str(server.make_url("/spreadsheets")))
        await sink.append_row(row)
    return received


def test_sheets_sink_posts_values_append():
    received = asyncio.run(_serve_sheets(200, ROW))

    assert received == [
        {
            "tail": "Sheet1!A:F:append",
            "option": "USER_ENTERED",
            "auth": "Bearer token",
            "body": {"values": [ROW]},
        }
    ]


def test_sheets_sink_raises_on_error_status():
    with pytest.raises(aiohttp.ClientResponseError):
        asyncio.run(_serve_sheets(503, ROW))
