from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import update

from fresq.canvas.service import CanvasService
from fresq.db.models.tickets import Ticket
from fresq.db.repo.codes_repo import CodesRepo
from fresq.db.repo.users_repo import UsersRepo
from fresq.db.session import SessionLocal
from fresq.economy.tickets.service import TicketService
from fresq.grid.service import TierService

from tests.integration.canvas_fixtures import (
    NOW_UTC,
    create_code,
    create_pending_ticket,
    seed_canvas,
)

SMALL_TIERS = (
    (0, 0, 1, 100),
    (1, 2, 9, 200),
    (2, 10, None, 300),
)


async def _pending_ticket(order_id: str) -> None:
    async with SessionLocal.begin() as session:
        user = await UsersRepo.get_or_create_by_email(session, "buyer@example.com")
    await create_pending_ticket(email="buyer@example.com", user_id=user.id, order_id=order_id)


async def _confirm(order_id: str):
    async with SessionLocal.begin() as session:
        return await TicketService.confirm_ticket_payment(session, order_id=order_id, now_utc=NOW_UTC)


async def _paid_ticket(order_id: str) -> None:
    await _pending_ticket(order_id)
    await _confirm(order_id)


@pytest.mark.asyncio
async def test_crossing_a_threshold_recenters_every_claimed_cell() -> None:
    await seed_canvas(tiers=SMALL_TIERS)
    corner = await create_code(x=0, y=0, color=4)
    far_corner = await create_code(x=99, y=99)
    unclaimed = await create_code()

    await _paid_ticket("ORDER-EXP-1")
    async with SessionLocal() as session:
        assert (await CanvasService.get_config(session)).width == 100

    async with SessionLocal.begin() as session:
        user = await UsersRepo.get_or_create_by_email(session, "buyer@example.com")
    await create_pending_ticket(email="buyer@example.com", user_id=user.id, order_id="ORDER-EXP-2")
    async with SessionLocal.begin() as session:
        result = await TicketService.confirm_ticket_payment(
            session,
            order_id="ORDER-EXP-2",
            now_utc=NOW_UTC,
        )

    upgrade = result.tier_upgrade
    assert upgrade.upgraded is True
    assert (upgrade.expansion.offset_x, upgrade.expansion.offset_y) == (50, 50)
    assert upgrade.expansion.cells_shifted == 2

    async with SessionLocal() as session:
        config = await CanvasService.get_config(session)
        moved_corner = await CodesRepo.get_by_code(session, corner.code)
        moved_far = await CodesRepo.get_by_code(session, far_corner.code)
        still_free = await CodesRepo.get_by_code(session, unclaimed.code)

    assert (config.width, config.height) == (200, 200)
    assert config.state_version == upgrade.expansion.state_version
    assert (moved_corner.cell_x, moved_corner.cell_y, moved_corner.color) == (50, 50, 4)
    assert (moved_far.cell_x, moved_far.cell_y) == (149, 149)
    assert still_free.cell_x is None


@pytest.mark.asyncio
async def test_repeated_upgrade_for_same_tier_is_a_no_op() -> None:
    await seed_canvas(tiers=SMALL_TIERS)
    await _paid_ticket("ORDER-NOOP-1")
    await _paid_ticket("ORDER-NOOP-2")

    async with SessionLocal.begin() as session:
        tier = await TierService.get_current_tier(session)
        result = await TierService.upgrade_tier(session, new_tier=tier, now_utc=NOW_UTC)

    assert tier.tier_number == 1
    assert result.upgraded is False
    assert result.reason == "new_tier_not_higher"


@pytest.mark.asyncio
async def test_successive_expansions_compose_offsets() -> None:
    await seed_canvas(tiers=SMALL_TIERS)
    code = await create_code(x=10, y=20)
    for index in range(10):
        await _paid_ticket(f"ORDER-STEP-{index}")

    async with SessionLocal() as session:
        config = await CanvasService.get_config(session)
        moved = await CodesRepo.get_by_code(session, code.code)
        progress = await TierService.get_tier_progress(session)

    assert (config.width, config.height) == (300, 300)
    assert (moved.cell_x, moved.cell_y) == (110, 120)
    assert progress.max_tier_reached is True
    assert progress.tickets_sold == 10


@pytest.mark.asyncio
async def test_sync_catches_up_when_grid_lags_behind_paid_count() -> None:
    await seed_canvas(tiers=SMALL_TIERS)
    code = await create_code(x=0, y=0)
    async with SessionLocal.begin() as session:
        user = await UsersRepo.get_or_create_by_email(session, "buyer@example.com")
    for index in range(2):
        await create_pending_ticket(
            email="buyer@example.com",
            user_id=user.id,
            order_id=f"ORDER-LAG-{index}",
        )
    async with SessionLocal.begin() as session:
        await session.execute(update(Ticket).values(status="paid", paid_at=NOW_UTC))

    async with SessionLocal.begin() as session:
        result = await TierService.sync_grid_to_current_tier(session, now_utc=NOW_UTC)

    assert result.upgraded is True
    assert result.new_tier.tier_number == 1
    async with SessionLocal() as session:
        moved = await CodesRepo.get_by_code(session, code.code)
    assert (moved.cell_x, moved.cell_y) == (50, 50)


@pytest.mark.asyncio
async def test_racing_confirmations_expand_the_grid_once() -> None:
    await seed_canvas(tiers=SMALL_TIERS)
    corner = await create_code(x=0, y=0, color=2)
    await _paid_ticket("ORDER-RACE-0")
    await _pending_ticket("ORDER-RACE-1")
    await _pending_ticket("ORDER-RACE-2")

    results = await asyncio.gather(_confirm("ORDER-RACE-1"), _confirm("ORDER-RACE-2"))

    upgrades = [result.tier_upgrade for result in results]
    assert sorted(upgrade.upgraded for upgrade in upgrades) == [False, True]
    loser = next(upgrade for upgrade in upgrades if not upgrade.upgraded)
    assert loser.reason == "new_tier_not_higher"

    async with SessionLocal() as session:
        config = await CanvasService.get_config(session)
        moved = await CodesRepo.get_by_code(session, corner.code)
        tickets_sold = await TierService.count_paid_tickets(session)

    assert (config.width, config.height) == (200, 200)
    assert (moved.cell_x, moved.cell_y, moved.color) == (50, 50, 2)
    assert tickets_sold == 3


@pytest.mark.asyncio
async def test_claim_racing_an_expansion_lands_on_one_consistent_grid() -> None:
    await seed_canvas(tiers=SMALL_TIERS)
    code = await create_code()
    await _paid_ticket("ORDER-MIX-0")
    await _pending_ticket("ORDER-MIX-1")

    async def _claim() -> None:
        async with SessionLocal.begin() as session:
            await CanvasService.claim_cell(session, code=code.code, x=10, y=10, now_utc=NOW_UTC)

    _, confirmed = await asyncio.gather(_claim(), _confirm("ORDER-MIX-1"))

    async with SessionLocal() as session:
        config = await CanvasService.get_config(session)
        claimed = await CodesRepo.get_by_code(session, code.code)

    assert confirmed.tier_upgrade.upgraded is True
    assert (config.width, config.height) == (200, 200)
    # Claimed before the shift and then moved, or claimed on the grown grid.
    assert (claimed.cell_x, claimed.cell_y) in {(60, 60), (10, 10)}
