from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from fresq.core.validators import normalize_email
from fresq.db.models.tickets import Ticket
from fresq.db.repo.tickets_repo import TicketsRepo
from fresq.economy.tickets.catalog import PackSpec, list_packs
from fresq.economy.tickets.errors import TicketNotFoundError
from fresq.economy.tickets.types import TicketStats


async def get_ticket_by_order_id(session: AsyncSession, *, order_id: str) -> Ticket:
    ticket = await TicketsRepo.get_by_order_id(session, order_id)
    if ticket is None:
        raise TicketNotFoundError
    return ticket


async def list_user_tickets(session: AsyncSession, *, email: str) -> list[Ticket]:
    normalized = normalize_email(email)
    if normalized is None:
        return []
    return await TicketsRepo.list_by_email(session, normalized)


async def list_recent_tickets(session: AsyncSession, *, limit: int = 10) -> list[Ticket]:
    return await TicketsRepo.list_recent(session, limit=limit)


async def get_ticket_stats(session: AsyncSession) -> TicketStats:
    counts = await TicketsRepo.count_by_status(session)
    return TicketStats(
        pending=counts["pending"],
        paid=counts["paid"],
        refunded=counts["refunded"],
        cancelled=counts["cancelled"],
        total=sum(counts.values()),
        total_revenue=await TicketsRepo.sum_paid_revenue(session),
    )


def list_pack_catalog() -> list[PackSpec]:
    return list_packs()
