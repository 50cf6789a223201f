"""SQLAlchemy implementation of the external check-in log."""

from __future__ import annotations

import asyncio
from typing import Sequence

from wake_streak_bot.core.interfaces.log_sink import AbstractCheckInLogSink
from wake_streak_bot.dataproviders.db import Base, make_engine, make_session_factory, session_scope
from wake_streak_bot.dataproviders.repositories._models import CheckInLogModel


class SqlLogSink(AbstractCheckInLogSink):
    """Append-only ``checkin_log`` table. Inserts run in a worker thread."""

    def __init__(self, url: str) -> None:
        self._engine = make_engine(url)
        Base.metadata.create_all(bind=self._engine)
        self._factory = make_session_factory(self._engine)

    async def append_row(self, row: Sequence[str]) -> None:
        await asyncio.to_thread(self._insert, row)

    def _insert(self, row: Sequence[str]) -> None:
        user_id, display_name, date, time, status, timezone = row
        with session_scope(self._factory) as session:
            session.add(
                CheckInLogModel(
                    user_id=user_id,
                    display_name=display_name,
                    date=date,
                    time=time,
                    status=status,
                    timezone=timezone,
                )
            )

    def dispose(self) -> None:
        self._engine.dispose()
