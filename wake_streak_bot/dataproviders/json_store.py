"""JSON-file backed implementation of AbstractUserRecordStore."""

from __future__ import annotations

import asyncio
import datetime as dt
import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

from wake_streak_bot.core.entities.user_record import MAX_LOG_ENTRIES, UserRecord
from wake_streak_bot.core.interfaces.repositories.user_repo import (
    AbstractUserRecordStore,
    RecordMutator,
)
from wake_streak_bot.utils import timeutils

logger = logging.getLogger(__name__)


def record_to_dict(record: UserRecord) -> Dict[str, Any]:
    return {
        "wake": timeutils.format_hhmm(record.wake),
        "sleep": timeutils.format_hhmm(record.sleep),
        "timezone": record.timezone,
        "streak": record.streak,
        "lastSuccessDate": record.last_success_date.isoformat() if record.last_success_date else None,
        "logHistory": list(record.log_history),
    }


def record_from_dict(data: Dict[str, Any]) -> UserRecord:
    last = data.get("lastSuccessDate")
    logs = data.get("logHistory", data.get("logs", []))
    return UserRecord(
        wake=timeutils.parse_hhmm(data["wake"]),
        sleep=timeutils.parse_hhmm(data["sleep"]),
        timezone=timeutils.get_zone(data["timezone"]).key,
        streak=int(data.get("streak") or 0),
        last_success_date=dt.date.fromisoformat(last) if last else None,
        log_history=[str(entry) for entry in logs][:MAX_LOG_ENTRIES],
    )


class SaveQueue:
    """Single-consumer write queue with one pending slot.

    Requests made while a write is running only mark the slot; the consumer
    snapshots the state when the next write starts, so bursts coalesce and
    two writes never overlap.
    """

    def __init__(self, snapshot: Callable[[], Any], write: Callable[[Any], None]) -> None:
        self._snapshot = snapshot
        self._write = write
        self._pending = False
        self._worker: asyncio.Task[None] | None = None

    @property
    def busy(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def request(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no event loop (startup scripts, sync callers): write right away
            self._write_logged(self._snapshot())
            return

        self._pending = True
        if not self.busy:
            self._worker = loop.create_task(self._drain())

    async def flush(self) -> None:
        """Wait until every requested save has been written (or has failed)."""
        while self.busy:
            await asyncio.shield(self._worker)

    async def _drain(self) -> None:
        while self._pending:
            self._pending = False
            snapshot = self._snapshot()
            await asyncio.to_thread(self._write_logged, snapshot)

    def _write_logged(self, snapshot: Any) -> None:
        try:
            self._write(snapshot)
        except Exception as e:
            logger.error("Failed writing user data: %s", e)


class JsonUserRecordStore(AbstractUserRecordStore):
    """In-memory map of user records mirrored to a JSON file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._records: Dict[str, UserRecord] = {}
        self._queue = SaveQueue(self._snapshot, self._write_file)

    # ---------------------------------------------------------------------
    # Startup
    # ---------------------------------------------------------------------

    def load(self) -> None:
        """Read the state file. Missing or corrupt files give an empty store."""
        if not self.path.exists():
            logger.info("No user data at %s, starting empty", self.path)
            self._records = {}
            return

        try:
            with self.path.open("r", encoding="utf-8") as fh:
                raw = json.load(fh)
            self._records = {str(uid): record_from_dict(data) for uid, data in raw.items()}
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Failed to parse %s, starting fresh: %s", self.path, e)
            self._records = {}
            return

        logger.info("Loaded %d user records from %s", len(self._records), self.path)

    # ---------------------------------------------------------------------
    # Public methods
    # ---------------------------------------------------------------------

    def get(self, user_id: str) -> UserRecord | None:
        return self._records.get(user_id)

    def upsert(self, user_id: str, mutator: RecordMutator) -> UserRecord:
        record = mutator(self._records.get(user_id))
        self._records[user_id] = record
        self.save()
        return record

    def list_all(self) -> List[Tuple[str, UserRecord]]:
        return list(self._records.items())

    def save(self) -> None:
        """Queue a full rewrite of the state file. Failures are logged only."""
        self._queue.request()

    async def flush(self) -> None:
        await self._queue.flush()

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------

    def _snapshot(self) -> str:
        data = {uid: record_to_dict(r) for uid, r in self._records.items()}
        return json.dumps(data, indent=2, ensure_ascii=False)

    def _write_file(self, payload: str) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, self.path)
