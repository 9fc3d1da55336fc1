from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.canvas.types import EmptyCell, PaintedCell, cell_state_of
from fresq.db.repo.codes_repo import CodesRepo
from fresq.db.repo.tickets_repo import TicketsRepo
from fresq.economy.tickets.errors import (
    PackRefundNotAllowedError,
    RefundBlockedError,
    TicketNotFoundError,
    TicketNotPendingError,
)
from fresq.economy.tickets.types import TicketCancelResult

logger = structlog.get_logger(__name__)


async def cancel_ticket(
    session: AsyncSession,
    *,
    order_id: str,
    now_utc: datetime,
) -> TicketCancelResult:
    ticket = await TicketsRepo.get_by_order_id_for_update(session, order_id)
    if ticket is None:
        raise TicketNotFoundError
    if ticket.status in {"refunded", "cancelled"}:
        raise TicketNotPendingError
    if ticket.quantity > 1:
        raise PackRefundNotAllowedError

    previous_status = ticket.status
    deleted_code: str | None = None
    if previous_status == "paid" and ticket.code_id is not None:
        code = await CodesRepo.get_by_id_for_update(session, ticket.code_id)
        if code is not None:
            state = cell_state_of(code)
            if isinstance(state, PaintedCell):
                raise RefundBlockedError("cell_painted")
            if not isinstance(state, EmptyCell):
                raise RefundBlockedError("cell_claimed")

            deleted_code = code.code
            ticket.code_id = None
            await session.flush()
            await CodesRepo.delete_by_id(session, code.id)

    ticket.status = "refunded" if previous_status == "paid" else "cancelled"
    ticket.refunded_at = now_utc
    await session.flush()

    logger.info(
        "ticket_cancelled",
        order_id=ticket.order_id,
        previous_status=previous_status,
        status=ticket.status,
        deleted_code=deleted_code is not None,
    )
    return TicketCancelResult(
        order_id=ticket.order_id,
        previous_status=previous_status,
        status=ticket.status,
        deleted_code=deleted_code,
    )
