from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.db.models.tickets import Ticket
from fresq.db.repo.tickets_repo import TicketsRepo
from fresq.economy.tickets.errors import (
    TicketAlreadyPaidError,
    TicketNotFoundError,
    TicketNotPendingError,
)
from fresq.economy.tickets.types import TicketConfirmResult
from fresq.grid.service import TierService
from fresq.services.code_registry import mint_code

logger = structlog.get_logger(__name__)


async def _lock_pending_ticket(session: AsyncSession, order_id: str) -> Ticket:
    ticket = await TicketsRepo.get_by_order_id_for_update(session, order_id)
    if ticket is None:
        raise TicketNotFoundError
    if ticket.status == "paid":
        raise TicketAlreadyPaidError
    if ticket.status != "pending":
        raise TicketNotPendingError
    return ticket


async def confirm_pack_purchase(
    session: AsyncSession,
    *,
    order_id: str,
    now_utc: datetime,
) -> TicketConfirmResult:
    """Marks a pending order paid and mints one code per ticket it carries.

    Purchased codes come first so the ticket's own ``code_id`` points at a
    code the buyer paid for; bonus codes follow. The grid is upgraded in the
    same transaction when the new paid total crosses a tier threshold.
    """
    ticket = await _lock_pending_ticket(session, order_id)

    purchased_codes: list[str] = []
    first_code_id: int | None = None
    for _ in range(ticket.base_quantity):
        row = await mint_code(session, user_id=ticket.user_id, source="purchased", now_utc=now_utc)
        if first_code_id is None:
            first_code_id = row.id
        purchased_codes.append(row.code)

    bonus_codes: list[str] = []
    for _ in range(ticket.bonus_quantity):
        row = await mint_code(session, user_id=ticket.user_id, source="pack_bonus", now_utc=now_utc)
        bonus_codes.append(row.code)

    previous_tier = await TierService.get_current_tier(session)

    ticket.status = "paid"
    ticket.code_id = first_code_id
    ticket.paid_at = now_utc
    await session.flush()

    tier_upgrade = await TierService.evaluate_upgrade(
        session,
        previous_tier_number=previous_tier.tier_number,
        now_utc=now_utc,
    )

    logger.info(
        "ticket_confirmed",
        order_id=ticket.order_id,
        purchased=len(purchased_codes),
        bonus=len(bonus_codes),
        tier_upgraded=tier_upgrade.upgraded,
    )
    return TicketConfirmResult(
        order_id=ticket.order_id,
        status=ticket.status,
        codes=purchased_codes + bonus_codes,
        purchased_codes=purchased_codes,
        bonus_codes=bonus_codes,
        tier_upgrade=tier_upgrade,
    )


async def confirm_ticket_payment(
    session: AsyncSession,
    *,
    order_id: str,
    now_utc: datetime,
) -> TicketConfirmResult:
    # A single ticket is a 1+0 pack; both paths share the minting flow.
    return await confirm_pack_purchase(session, order_id=order_id, now_utc=now_utc)
