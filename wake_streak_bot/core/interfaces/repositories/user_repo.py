"""Abstract store interface for UserRecord entities."""

from __future__ import annotations

import abc
from typing import Callable, List, Protocol, Tuple

from wake_streak_bot.core.entities.user_record import UserRecord

RecordMutator = Callable[[UserRecord | None], UserRecord]


class AbstractUserRecordStore(Protocol):
    """User record store contract."""

    @abc.abstractmethod
    def get(self, user_id: str) -> UserRecord | None: ...

    @abc.abstractmethod
    def upsert(self, user_id: str, mutator: RecordMutator) -> UserRecord: ...

    @abc.abstractmethod
    def list_all(self) -> List[Tuple[str, UserRecord]]: ...
