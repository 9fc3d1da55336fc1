from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.db.models.codes import Code


class CodesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, code_id: int) -> Code | None:
        return await session.get(Code, code_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, code_id: int) -> Code | None:
        stmt = select(Code).where(Code.id == code_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_code(session: AsyncSession, code: str) -> Code | None:
        stmt = select(Code).where(Code.code == code)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_code_for_update(session: AsyncSession, code: str) -> Code | None:
        stmt = select(Code).where(Code.code == code).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_position(session: AsyncSession, *, x: int, y: int) -> Code | None:
        stmt = select(Code).where(Code.cell_x == x, Code.cell_y == y)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def is_position_taken(session: AsyncSession, *, x: int, y: int) -> bool:
        stmt = select(Code.id).where(Code.cell_x == x, Code.cell_y == y).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def exists(session: AsyncSession, code: str) -> bool:
        stmt = select(Code.id).where(Code.code == code).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_by_user_id(session: AsyncSession, user_id: int) -> list[Code]:
        stmt = select(Code).where(Code.user_id == user_id).order_by(Code.created_at.asc(), Code.id.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_recent(session: AsyncSession, *, limit: int = 100) -> list[Code]:
        stmt = select(Code).order_by(Code.created_at.desc(), Code.id.desc()).limit(limit)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_painted_cells(session: AsyncSession) -> list[tuple[int, int, int]]:
        stmt = select(Code.cell_x, Code.cell_y, Code.color).where(
            Code.cell_x.is_not(None),
            Code.cell_y.is_not(None),
            Code.color.is_not(None),
        )
        result = await session.execute(stmt)
        return [(int(x), int(y), int(color)) for x, y, color in result.all()]

    @staticmethod
    async def count_all(session: AsyncSession) -> int:
        result = await session.execute(select(func.count(Code.id)))
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_claimed(session: AsyncSession) -> int:
        stmt = select(func.count(Code.id)).where(Code.cell_x.is_not(None))
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_painted(session: AsyncSession) -> int:
        stmt = select(func.count(Code.id)).where(Code.color.is_not(None))
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def create(session: AsyncSession, *, code: Code) -> Code:
        session.add(code)
        await session.flush()
        return code

    @staticmethod
    async def shift_positions(
        session: AsyncSession,
        *,
        offset_x: int,
        offset_y: int,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(Code)
            .where(Code.cell_x.is_not(None), Code.cell_y.is_not(None))
            .values(
                cell_x=Code.cell_x + offset_x,
                cell_y=Code.cell_y + offset_y,
                updated_at=now_utc,
            )
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def clear_all_positions(session: AsyncSession, *, now_utc: datetime) -> int:
        stmt = (
            update(Code)
            .where(Code.cell_x.is_not(None))
            .values(cell_x=None, cell_y=None, color=None, updated_at=now_utc)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def delete_by_id(session: AsyncSession, code_id: int) -> None:
        await session.execute(delete(Code).where(Code.id == code_id))
