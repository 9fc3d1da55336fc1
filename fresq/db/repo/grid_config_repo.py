from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.db.models.grid_config import GRID_CONFIG_ID, GridConfig


class GridConfigRepo:
    @staticmethod
    async def get(session: AsyncSession) -> GridConfig | None:
        stmt = select(GridConfig).where(GridConfig.id == GRID_CONFIG_ID)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_for_update(session: AsyncSession) -> GridConfig | None:
        stmt = select(GridConfig).where(GridConfig.id == GRID_CONFIG_ID).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def bump_version(config: GridConfig, *, now_utc: datetime) -> int:
        config.state_version += 1
        config.updated_at = now_utc
        return config.state_version

    @staticmethod
    async def get_for_share(session: AsyncSession) -> GridConfig | None:
        stmt = select(GridConfig).where(GridConfig.id == GRID_CONFIG_ID).with_for_update(read=True)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
