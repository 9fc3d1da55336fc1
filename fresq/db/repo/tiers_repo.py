from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.db.models.tiers import Tier


class TiersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, tier_id: int) -> Tier | None:
        return await session.get(Tier, tier_id)

    @staticmethod
    async def get_by_number(session: AsyncSession, tier_number: int) -> Tier | None:
        stmt = select(Tier).where(Tier.tier_number == tier_number)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_active_by_number(session: AsyncSession, tier_number: int) -> Tier | None:
        stmt = select(Tier).where(Tier.tier_number == tier_number, Tier.is_active.is_(True))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_for_ticket_count(session: AsyncSession, ticket_count: int) -> Tier | None:
        stmt = (
            select(Tier)
            .where(
                Tier.is_active.is_(True),
                Tier.min_tickets <= ticket_count,
                or_(Tier.max_tickets.is_(None), Tier.max_tickets >= ticket_count),
            )
            .order_by(Tier.tier_number.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_dimensions(session: AsyncSession, *, width: int, height: int) -> Tier | None:
        stmt = (
            select(Tier)
            .where(Tier.grid_width == width, Tier.grid_height == height)
            .order_by(Tier.tier_number.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_active(session: AsyncSession) -> list[Tier]:
        stmt = select(Tier).where(Tier.is_active.is_(True)).order_by(Tier.tier_number.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())
