"""In-process membership registry for platforms without native roles."""

from __future__ import annotations

from typing import Dict, Hashable, Iterable, Set

from wake_streak_bot.core.interfaces.membership import AbstractMembershipGateway


class InMemoryMembershipGateway(AbstractMembershipGateway):
    """Tracks which provisioned roles each principal holds."""

    def __init__(self, provisioned: Iterable[str]) -> None:
        self._provisioned = set(provisioned)
        self._held: Dict[Hashable, Set[str]] = {}

    def is_provisioned(self, role: str) -> bool:
        return role in self._provisioned

    async def roles_of(self, principal: Hashable) -> Set[str]:
        return set(self._held.get(principal, set()))

    async def remove_roles(self, principal: Hashable, roles: Iterable[str]) -> None:
        self._held.get(principal, set()).difference_update(roles)

    async def grant_role(self, principal: Hashable, role: str) -> None:
        if role not in self._provisioned:
            raise ValueError(f"Role {role!r} is not provisioned")
        self._held.setdefault(principal, set()).add(role)

    def badge_of(self, principal: Hashable) -> str | None:
        """Any one role held by ``principal`` (tier sync keeps at most one)."""
        held = self._held.get(principal)
        return next(iter(held)) if held else None
