from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.canvas.errors import (
    AlreadyAssignedError,
    CellTakenError,
    InvalidCodeCountError,
    InvalidCodeError,
    InvalidColorError,
    InvalidCoordinatesError,
    InvalidPaletteError,
    NotClaimedError,
    StaleStateError,
)
from fresq.canvas.types import (
    CanvasSnapshot,
    CanvasStats,
    CellClaimResult,
    CellClearResult,
    CellPaintResult,
    CodeValidation,
    EmptyCell,
    PaintedCell,
    cell_state_of,
)
from fresq.core.codes import is_well_formed_code, normalize_code
from fresq.core.validators import is_valid_color, is_valid_palette, is_within_grid, normalize_email
from fresq.db.models.codes import Code
from fresq.db.models.grid_config import GridConfig
from fresq.db.repo.codes_repo import CodesRepo
from fresq.db.repo.grid_config_repo import GridConfigRepo
from fresq.db.repo.users_repo import UsersRepo
from fresq.grid.errors import GridConfigMissingError
from fresq.services.code_registry import mint_code

logger = structlog.get_logger(__name__)

MAX_GENERATED_CODES = 100


async def _load_config(session: AsyncSession, *, for_update: bool = False) -> GridConfig:
    if for_update:
        config = await GridConfigRepo.get_for_update(session)
    else:
        config = await GridConfigRepo.get(session)
    if config is None:
        raise GridConfigMissingError
    return config


async def _lock_code(session: AsyncSession, raw_code: str) -> Code:
    code = normalize_code(raw_code)
    if not is_well_formed_code(code):
        raise InvalidCodeError
    row = await CodesRepo.get_by_code_for_update(session, code)
    if row is None:
        raise InvalidCodeError
    return row


class CanvasService:
    @staticmethod
    async def claim_cell(
        session: AsyncSession,
        *,
        code: str,
        x: int,
        y: int,
        now_utc: datetime,
        expected_state_version: int | None = None,
    ) -> CellClaimResult:
        # Shared lock: claims run side by side but never interleave with an expansion.
        config = await GridConfigRepo.get_for_share(session)
        if config is None:
            raise GridConfigMissingError
        if expected_state_version is not None and expected_state_version != config.state_version:
            raise StaleStateError
        if not is_within_grid(x, y, width=config.width, height=config.height):
            raise InvalidCoordinatesError

        row = await _lock_code(session, code)
        state = cell_state_of(row)
        if not isinstance(state, EmptyCell):
            if state.position == (x, y):
                return CellClaimResult(code=row.code, x=x, y=y, idempotent_replay=True)
            raise AlreadyAssignedError

        if await CodesRepo.is_position_taken(session, x=x, y=y):
            raise CellTakenError

        row.cell_x = x
        row.cell_y = y
        row.updated_at = now_utc
        try:
            await session.flush()
        except IntegrityError as exc:
            # A concurrent claim committed the same cell after our existence check.
            logger.info("cell_claim_conflict", x=x, y=y)
            raise CellTakenError from exc

        return CellClaimResult(code=row.code, x=x, y=y, idempotent_replay=False)

    @staticmethod
    async def paint_cell(
        session: AsyncSession,
        *,
        code: str,
        color: int,
        now_utc: datetime,
    ) -> CellPaintResult:
        if not is_valid_color(color):
            raise InvalidColorError

        try:
            row = await _lock_code(session, code)
        except InvalidCodeError as exc:
            raise NotClaimedError from exc

        state = cell_state_of(row)
        if isinstance(state, EmptyCell):
            raise NotClaimedError

        row.color = color
        row.updated_at = now_utc
        await session.flush()
        x, y = state.position
        return CellPaintResult(code=row.code, x=x, y=y, color=color)

    @staticmethod
    async def validate_code(session: AsyncSession, *, code: str) -> CodeValidation:
        normalized = normalize_code(code)
        if not is_well_formed_code(normalized):
            raise InvalidCodeError
        row = await CodesRepo.get_by_code(session, normalized)
        if row is None:
            raise InvalidCodeError
        return CodeValidation(code=row.code, state=cell_state_of(row))

    @staticmethod
    async def list_user_codes(session: AsyncSession, *, email: str) -> list[CodeValidation]:
        normalized = normalize_email(email)
        if normalized is None:
            return []
        user = await UsersRepo.get_by_email(session, normalized)
        if user is None:
            return []
        rows = await CodesRepo.list_by_user_id(session, user.id)
        return [CodeValidation(code=row.code, state=cell_state_of(row)) for row in rows]

    @staticmethod
    async def clear_cell(session: AsyncSession, *, code: str, now_utc: datetime) -> CellClearResult:
        """Frees the cell held by a code: position and color are reset together."""
        config = await _load_config(session, for_update=True)
        row = await _lock_code(session, code)
        state = cell_state_of(row)
        if isinstance(state, EmptyCell):
            raise NotClaimedError

        x, y = state.position
        row.cell_x = None
        row.cell_y = None
        row.color = None
        row.updated_at = now_utc
        state_version = GridConfigRepo.bump_version(config, now_utc=now_utc)
        await session.flush()

        logger.info("cell_cleared", code=row.code, x=x, y=y, state_version=state_version)
        return CellClearResult(code=row.code, x=x, y=y, state_version=state_version)

    @staticmethod
    async def reset_cell_color(session: AsyncSession, *, code: str, now_utc: datetime) -> CellClearResult:
        config = await _load_config(session, for_update=True)
        row = await _lock_code(session, code)
        state = cell_state_of(row)
        if isinstance(state, EmptyCell):
            raise NotClaimedError

        x, y = state.position
        row.color = None
        row.updated_at = now_utc
        state_version = GridConfigRepo.bump_version(config, now_utc=now_utc)
        await session.flush()

        logger.info("cell_color_reset", code=row.code, x=x, y=y, state_version=state_version)
        return CellClearResult(code=row.code, x=x, y=y, state_version=state_version)

    @staticmethod
    async def full_reset(session: AsyncSession, *, now_utc: datetime) -> int:
        config = await _load_config(session, for_update=True)
        cleared = await CodesRepo.clear_all_positions(session, now_utc=now_utc)
        state_version = GridConfigRepo.bump_version(config, now_utc=now_utc)
        await session.flush()

        logger.warning("canvas_full_reset", cleared_cells=cleared, state_version=state_version)
        return state_version

    @staticmethod
    async def update_palette(
        session: AsyncSession,
        *,
        palette: list[str],
        now_utc: datetime,
    ) -> GridConfig:
        if not is_valid_palette(palette):
            raise InvalidPaletteError

        config = await _load_config(session, for_update=True)
        config.palette = [color.upper() for color in palette]
        GridConfigRepo.bump_version(config, now_utc=now_utc)
        await session.flush()
        return config

    @staticmethod
    async def generate_codes(session: AsyncSession, *, count: int, now_utc: datetime) -> list[str]:
        if not 0 < count <= MAX_GENERATED_CODES:
            raise InvalidCodeCountError

        codes: list[str] = []
        for _ in range(count):
            row = await mint_code(session, user_id=None, source="purchased", now_utc=now_utc)
            codes.append(row.code)
        return codes

    @staticmethod
    async def get_config(session: AsyncSession) -> GridConfig:
        return await _load_config(session)

    @staticmethod
    async def get_canvas_state(session: AsyncSession) -> CanvasSnapshot:
        config = await _load_config(session)
        cells = await CodesRepo.list_painted_cells(session)
        return CanvasSnapshot(
            width=config.width,
            height=config.height,
            state_version=config.state_version,
            palette=list(config.palette),
            cells=[PaintedCell(x=x, y=y, color=color) for x, y, color in cells],
        )

    @staticmethod
    async def get_canvas_stats(session: AsyncSession) -> CanvasStats:
        return CanvasStats(
            total_codes=await CodesRepo.count_all(session),
            claimed_codes=await CodesRepo.count_claimed(session),
            painted_codes=await CodesRepo.count_painted(session),
        )
