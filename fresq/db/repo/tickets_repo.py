from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.db.models.tickets import Ticket

TICKET_STATUSES = ("pending", "paid", "refunded", "cancelled")


class TicketsRepo:
    @staticmethod
    async def get_by_order_id(session: AsyncSession, order_id: str) -> Ticket | None:
        stmt = select(Ticket).where(Ticket.order_id == order_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_order_id_for_update(session: AsyncSession, order_id: str) -> Ticket | None:
        stmt = select(Ticket).where(Ticket.order_id == order_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_email(session: AsyncSession, email: str) -> list[Ticket]:
        stmt = select(Ticket).where(Ticket.email == email).order_by(Ticket.created_at.desc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_recent(session: AsyncSession, *, limit: int = 10) -> list[Ticket]:
        stmt = select(Ticket).order_by(Ticket.created_at.desc(), Ticket.id.desc()).limit(limit)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def count_paid(session: AsyncSession) -> int:
        stmt = select(func.count(Ticket.id)).where(Ticket.status == "paid")
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_by_status(session: AsyncSession) -> dict[str, int]:
        stmt = select(Ticket.status, func.count(Ticket.id)).group_by(Ticket.status)
        result = await session.execute(stmt)
        counts = {status: 0 for status in TICKET_STATUSES}
        for status, count in result.all():
            counts[str(status)] = int(count)
        return counts

    @staticmethod
    async def sum_paid_revenue(session: AsyncSession) -> Decimal:
        stmt = select(func.coalesce(func.sum(Ticket.amount), 0)).where(Ticket.status == "paid")
        result = await session.execute(stmt)
        return Decimal(result.scalar_one() or 0)

    @staticmethod
    async def create(session: AsyncSession, *, ticket: Ticket) -> Ticket:
        session.add(ticket)
        await session.flush()
        return ticket
