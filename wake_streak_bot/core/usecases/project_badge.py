"""Streak tier badges and their resynchronisation with the membership system."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Hashable, Sequence

from wake_streak_bot.core.interfaces.membership import AbstractMembershipGateway

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Tier:
    threshold: int
    role: str


# Highest threshold first
DEFAULT_TIERS: tuple[Tier, ...] = (
    Tier(100, "🔥🧠 Anti-Sloth LV10"),
    Tier(50, "⚡👑 Anti-Sloth LV9"),
    Tier(30, "🌄💪 Anti-Sloth LV8"),
    Tier(21, "☀️🧘 Anti-Sloth LV7"),
    Tier(14, "🐓🔔 Anti-Sloth LV6"),
    Tier(10, "🎯⏰ Anti-Sloth LV5"),
    Tier(7, "😎🌅 Anti-Sloth LV4"),
    Tier(5, "😴🔓 Anti-Sloth LV3"),
    Tier(3, "🐢⏳ Anti-Sloth LV2"),
    Tier(1, "🛌💤 Anti-Sloth LV1"),
)


def project(streak: int, tiers: Sequence[Tier] = DEFAULT_TIERS) -> str | None:
    """Return the role of the highest tier whose threshold ``streak`` reaches."""
    matched = [t for t in tiers if streak >= t.threshold]
    if not matched:
        return None
    return max(matched, key=lambda t: t.threshold).role


class BadgeProjector:
    """Keeps exactly one tier role on a principal, matching its current streak.

    Every call is a full resync: all tier roles the principal holds are removed
    and the matched one granted, so repeated calls are harmless.
    """

    def __init__(self, gateway: AbstractMembershipGateway, tiers: Sequence[Tier] = DEFAULT_TIERS) -> None:
        self._gateway = gateway
        self._tiers = tuple(tiers)
        self._tier_roles = {t.role for t in self._tiers}

    def project(self, streak: int) -> str | None:
        return project(streak, self._tiers)

    async def sync(self, principal: Hashable, streak: int) -> str | None:
        """Apply the projected role to ``principal``. Never raises.

        Below the lowest threshold every tier role is removed and none granted.
        """
        role = self.project(streak)
        if role is not None and not self._gateway.is_provisioned(role):
            logger.warning("Missing role %r, skipping badge update for %s", role, principal)
            return None

        try:
            held = await self._gateway.roles_of(principal)
            stale = held & self._tier_roles
            if stale:
                await self._gateway.remove_roles(principal, stale)
            if role is not None:
                await self._gateway.grant_role(principal, role)
        except Exception as e:
            logger.error("Role update failed for %s: %s", principal, e)
            return None

        if role is None:
            logger.info("Cleared tier roles of %s", principal)
        else:
            logger.info("Assigned %r to %s", role, principal)
        return role
