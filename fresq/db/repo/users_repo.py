from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def get_by_email(session: AsyncSession, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_or_create_by_email(session: AsyncSession, email: str) -> User:
        # ON CONFLICT keeps two first-time purchases by the same buyer from colliding.
        stmt = insert(User).values(email=email).on_conflict_do_nothing(index_elements=[User.email])
        await session.execute(stmt)
        user = await UsersRepo.get_by_email(session, email)
        if user is None:
            raise RuntimeError(f"user row missing after upsert: {email}")
        return user
