"""Interface for the external membership/role system."""

from __future__ import annotations

import abc
from typing import Hashable, Iterable, Protocol, Set


class AbstractMembershipGateway(Protocol):
    """Role operations for a principal (a member of some community)."""

    @abc.abstractmethod
    def is_provisioned(self, role: str) -> bool: ...

    @abc.abstractmethod
    async def roles_of(self, principal: Hashable) -> Set[str]: ...

    @abc.abstractmethod
    async def remove_roles(self, principal: Hashable, roles: Iterable[str]) -> None: ...

    @abc.abstractmethod
    async def grant_role(self, principal: Hashable, role: str) -> None: ...
