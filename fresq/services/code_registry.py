from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.core.codes import generate_code
from fresq.db.models.codes import CODE_SOURCES, Code
from fresq.db.repo.codes_repo import CodesRepo

logger = structlog.get_logger(__name__)

MAX_MINT_ATTEMPTS = 10


class CodeGenerationError(Exception):
    pass


async def mint_code(
    session: AsyncSession,
    *,
    user_id: int | None,
    source: str,
    now_utc: datetime,
    max_attempts: int = MAX_MINT_ATTEMPTS,
) -> Code:
    """Inserts one fresh empty code, regenerating on a collision with an existing code."""
    if source not in CODE_SOURCES:
        raise ValueError(f"unknown code source: {source}")

    for attempt in range(1, max_attempts + 1):
        candidate = generate_code()
        if await CodesRepo.exists(session, candidate):
            logger.info("code_collision_regenerated", attempt=attempt, reason="pre_check")
            continue

        try:
            async with session.begin_nested():
                return await CodesRepo.create(
                    session,
                    code=Code(
                        code=candidate,
                        user_id=user_id,
                        source=source,
                        created_at=now_utc,
                        updated_at=now_utc,
                    ),
                )
        except IntegrityError:
            # Lost a race with a concurrent insert of the same string.
            logger.info("code_collision_regenerated", attempt=attempt, reason="unique_violation")
            continue

    raise CodeGenerationError(f"could not mint a unique code in {max_attempts} attempts")
