import asyncio
import datetime as dt

import pytest

from wake_streak_bot.core.entities.user_record import UserRecord
from wake_streak_bot.core.usecases import check_in
from wake_streak_bot.core.usecases.project_badge import DEFAULT_TIERS, BadgeProjector, Tier, project
from wake_streak_bot.dataproviders.membership import InMemoryMembershipGateway

ROLES = {t.threshold: t.role for t in DEFAULT_TIERS}
PRINCIPAL = (-100, 42)


def _at(day, hour):
    return dt.datetime(day.year, day.month, day.day, hour, 0, tzinfo=dt.timezone.utc)


@pytest.mark.parametrize(
    "streak, threshold",
    [(1, 1), (2, 1), (3, 3), (6, 5), (13, 10), (29, 21), (100, 100), (365, 100)],
)
def test_project_picks_highest_reached_tier(streak, threshold):
    assert project(streak) == ROLES[threshold]


def test_project_below_lowest_threshold_has_no_role():
    assert project(0) is None


def test_project_does_not_depend_on_tier_order():
    tiers = [Tier(1, "bronze"), Tier(10, "gold"), Tier(5, "silver")]
    assert project(7, tiers) == "silver"


def _gateway(*extra):
    return InMemoryMembershipGateway([*ROLES.values(), *extra])


def test_sync_replaces_tier_roles_and_keeps_others():
    gateway = _gateway("Member")
    projector = BadgeProjector(gateway)

    async def scenario():
        await gateway.grant_role(PRINCIPAL, "Member")
        await gateway.grant_role(PRINCIPAL, ROLES[1])
        await gateway.grant_role(PRINCIPAL, ROLES[10])
        assert await projector.sync(PRINCIPAL, 3) == ROLES[3]
        first = await gateway.roles_of(PRINCIPAL)
        await projector.sync(PRINCIPAL, 3)
        return first, await gateway.roles_of(PRINCIPAL)

    first, second = asyncio.run(scenario())
    assert first == {"Member", ROLES[3]}
    assert second == first


def test_sync_without_matching_tier_clears_held_tier_roles():
    gateway = _gateway("Member")

    async def scenario():
        await gateway.grant_role(PRINCIPAL, "Member")
        await gateway.grant_role(PRINCIPAL, ROLES[5])
        result = await BadgeProjector(gateway).sync(PRINCIPAL, 0)
        return result, await gateway.roles_of(PRINCIPAL)

    assert asyncio.run(scenario()) == (None, {"Member"})
    assert gateway.badge_of(PRINCIPAL) == "Member"


def test_streak_reset_removes_badge():
    gateway = _gateway()
    projector = BadgeProjector(gateway)
    record = UserRecord(wake=dt.time(7, 0), sleep=dt.time(23, 0), timezone="UTC")
    start = dt.date(2024, 3, 1)

    async def scenario(record):
        for offset in range(5):
            day = start + dt.timedelta(days=offset)
            outcome, record = check_in.evaluate(record, _at(day, 7))
            await projector.sync(PRINCIPAL, outcome.new_streak)
        assert gateway.badge_of(PRINCIPAL) == ROLES[5]

        late_day = start + dt.timedelta(days=8)
        outcome, record = check_in.evaluate(record, _at(late_day, 11))
        await projector.sync(PRINCIPAL, outcome.new_streak)
        return outcome

    outcome = asyncio.run(scenario(record))
    assert outcome.reset_occurred
    assert gateway.badge_of(PRINCIPAL) is None


def test_sync_with_unprovisioned_role_is_a_warning_no_op(caplog):
    gateway = InMemoryMembershipGateway([ROLES[1]])

    async def scenario():
        await gateway.grant_role(PRINCIPAL, ROLES[1])
        result = await BadgeProjector(gateway).sync(PRINCIPAL, 7)
        return result, await gateway.roles_of(PRINCIPAL)

    assert asyncio.run(scenario()) == (None, {ROLES[1]})
    assert "Missing role" in caplog.text


class _BrokenGateway(InMemoryMembershipGateway):
    async def grant_role(self, principal, role):
        raise ConnectionError("membership service down")


def test_sync_logs_gateway_failures(caplog):
    gateway = _BrokenGateway(ROLES.values())
    assert asyncio.run(BadgeProjector(gateway).sync(PRINCIPAL, 3)) is None
    assert "Role update failed" in caplog.text


def test_badge_of_reports_held_tier():
    gateway = _gateway()
    asyncio.run(BadgeProjector(gateway).sync(PRINCIPAL, 14))
    assert gateway.badge_of(PRINCIPAL) == ROLES[14]
    assert gateway.badge_of((1, 2)) is None
