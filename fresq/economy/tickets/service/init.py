from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.db.repo.tickets_repo import TicketsRepo
from fresq.db.repo.users_repo import UsersRepo
from fresq.economy.tickets.catalog import SOLO_UNIT_PRICE, get_pack
from fresq.economy.tickets.errors import PackNotFoundError, TicketValidationError
from fresq.economy.tickets.types import TicketCreateResult
from fresq.grid.service import TierService

from .builder import _as_create_result, _build_ticket
from .utilities import _require_email

logger = structlog.get_logger(__name__)


async def create_ticket(
    session: AsyncSession,
    *,
    email: str,
    now_utc: datetime,
    amount: Decimal = SOLO_UNIT_PRICE,
    payment_provider: str = "manual",
    payment_session_id: str | None = None,
) -> TicketCreateResult:
    normalized_email = _require_email(email)
    if amount < 0:
        raise TicketValidationError

    user = await UsersRepo.get_or_create_by_email(session, normalized_email)
    tier = await TierService.get_current_tier(session)
    ticket = await TicketsRepo.create(
        session,
        ticket=_build_ticket(
            email=normalized_email,
            user_id=user.id,
            amount=amount,
            base_quantity=1,
            bonus_quantity=0,
            tier=tier,
            payment_provider=payment_provider,
            payment_session_id=payment_session_id,
            now_utc=now_utc,
        ),
    )
    logger.info("ticket_created", order_id=ticket.order_id, tier=tier.tier_number)
    return _as_create_result(ticket, tier=tier)


async def create_pack_purchase(
    session: AsyncSession,
    *,
    email: str,
    pack_key: str,
    now_utc: datetime,
    payment_provider: str = "manual",
    payment_session_id: str | None = None,
) -> TicketCreateResult:
    normalized_email = _require_email(email)
    pack = get_pack(pack_key)
    if pack is None:
        raise PackNotFoundError

    user = await UsersRepo.get_or_create_by_email(session, normalized_email)
    tier = await TierService.get_current_tier(session)
    ticket = await TicketsRepo.create(
        session,
        ticket=_build_ticket(
            email=normalized_email,
            user_id=user.id,
            amount=pack.price,
            base_quantity=pack.base_tickets,
            bonus_quantity=pack.bonus_tickets,
            tier=tier,
            payment_provider=payment_provider,
            payment_session_id=payment_session_id,
            now_utc=now_utc,
        ),
    )
    logger.info(
        "pack_purchase_created",
        order_id=ticket.order_id,
        pack_key=pack.pack_key,
        quantity=ticket.quantity,
        tier=tier.tier_number,
    )
    return _as_create_result(ticket, tier=tier, pack_key=pack.pack_key)
