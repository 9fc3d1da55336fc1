from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fresq.db.models.tickets import Ticket
from fresq.db.models.tiers import Tier
from fresq.economy.tickets.types import TicketCreateResult

from .utilities import _build_order_id


def _build_ticket(
    *,
    email: str,
    user_id: int,
    amount: Decimal,
    base_quantity: int,
    bonus_quantity: int,
    tier: Tier,
    payment_provider: str,
    payment_session_id: str | None,
    now_utc: datetime,
) -> Ticket:
    return Ticket(
        order_id=_build_order_id(now_utc=now_utc),
        email=email,
        user_id=user_id,
        payment_provider=payment_provider,
        payment_session_id=payment_session_id,
        amount=amount,
        quantity=base_quantity + bonus_quantity,
        base_quantity=base_quantity,
        bonus_quantity=bonus_quantity,
        status="pending",
        tier_id=tier.id,
        created_at=now_utc,
    )


def _as_create_result(ticket: Ticket, *, tier: Tier, pack_key: str | None = None) -> TicketCreateResult:
    return TicketCreateResult(
        order_id=ticket.order_id,
        email=ticket.email,
        amount=ticket.amount,
        quantity=ticket.quantity,
        base_quantity=ticket.base_quantity,
        bonus_quantity=ticket.bonus_quantity,
        status=ticket.status,
        tier_number=tier.tier_number,
        pack_key=pack_key,
    )
