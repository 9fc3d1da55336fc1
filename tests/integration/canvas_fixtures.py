from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from fresq.db.models.codes import Code
from fresq.db.models.grid_config import GridConfig
from fresq.db.models.tickets import Ticket
from fresq.db.models.tiers import Tier
from fresq.db.session import SessionLocal
from fresq.services.code_registry import mint_code

UTC = timezone.utc
NOW_UTC = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

PALETTE = [
    "#000000",
    "#FFFFFF",
    "#E53935",
    "#FB8C00",
    "#FDD835",
    "#43A047",
    "#00ACC1",
    "#1E88E5",
    "#8E24AA",
    "#6D4C41",
]

# tier_number, min_tickets, max_tickets, grid size
DEFAULT_TIERS = (
    (0, 0, 999, 200),
    (1, 1000, 4999, 300),
    (2, 5000, 19999, 500),
    (3, 20000, 49999, 700),
    (4, 50000, None, 1000),
)


async def seed_canvas(
    *,
    tiers: tuple[tuple[int, int, int | None, int], ...] = DEFAULT_TIERS,
    grid_size: int | None = None,
) -> None:
    size = grid_size if grid_size is not None else tiers[0][3]
    async with SessionLocal.begin() as session:
        for tier_number, min_tickets, max_tickets, tier_size in tiers:
            session.add(
                Tier(
                    tier_number=tier_number,
                    min_tickets=min_tickets,
                    max_tickets=max_tickets,
                    grid_width=tier_size,
                    grid_height=tier_size,
                    prize_amount=Decimal("100.00") * (tier_number + 1),
                )
            )
        session.add(
            GridConfig(
                width=size,
                height=size,
                state_version=0,
                palette=list(PALETTE),
                updated_at=NOW_UTC,
            )
        )


async def create_code(
    *,
    user_id: int | None = None,
    x: int | None = None,
    y: int | None = None,
    color: int | None = None,
) -> Code:
    async with SessionLocal.begin() as session:
        code = await mint_code(session, user_id=user_id, source="purchased", now_utc=NOW_UTC)
        if x is not None and y is not None:
            code.cell_x = x
            code.cell_y = y
            code.color = color
            await session.flush()
        return code


async def create_pending_ticket(
    *,
    email: str,
    user_id: int,
    base_quantity: int = 1,
    bonus_quantity: int = 0,
    order_id: str,
) -> Ticket:
    async with SessionLocal.begin() as session:
        ticket = Ticket(
            order_id=order_id,
            email=email,
            user_id=user_id,
            amount=Decimal("2.00") * base_quantity,
            quantity=base_quantity + bonus_quantity,
            base_quantity=base_quantity,
            bonus_quantity=bonus_quantity,
            status="pending",
            created_at=NOW_UTC,
        )
        session.add(ticket)
        await session.flush()
        return ticket
