from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from fresq.db.models.grid_config import GridConfig
from fresq.db.models.tiers import Tier
from fresq.db.repo.codes_repo import CodesRepo
from fresq.db.repo.grid_config_repo import GridConfigRepo
from fresq.db.repo.tickets_repo import TicketsRepo
from fresq.db.repo.tiers_repo import TiersRepo
from fresq.grid.errors import GridConfigMissingError, TierNotFoundError
from fresq.grid.types import GridExpansion, TierProgress, TierUpgradeResult

logger = structlog.get_logger(__name__)

DEFAULT_TIER_NUMBER = 0


def center_offset(*, old_width: int, old_height: int, new_width: int, new_height: int) -> tuple[int, int]:
    """Offset that places the old grid in the middle of the new one."""
    return (new_width - old_width) // 2, (new_height - old_height) // 2


def progress_percent(*, tickets_sold: int, next_tier_min_tickets: int) -> float:
    if next_tier_min_tickets <= 0:
        return 100.0
    progress = min(100.0, tickets_sold / next_tier_min_tickets * 100)
    return round(progress, 2)


class TierService:
    @staticmethod
    async def count_paid_tickets(session: AsyncSession) -> int:
        return await TicketsRepo.count_paid(session)

    @staticmethod
    async def get_current_tier(session: AsyncSession) -> Tier:
        tickets_sold = await TicketsRepo.count_paid(session)
        tier = await TiersRepo.get_for_ticket_count(session, tickets_sold)
        if tier is not None:
            return tier

        tier = await TiersRepo.get_by_number(session, DEFAULT_TIER_NUMBER)
        if tier is None:
            raise TierNotFoundError(f"no tier for {tickets_sold} paid tickets and no default tier")
        return tier

    @staticmethod
    async def get_next_tier(session: AsyncSession, tier_number: int) -> Tier | None:
        return await TiersRepo.get_active_by_number(session, tier_number + 1)

    @staticmethod
    async def get_all_tiers(session: AsyncSession) -> list[Tier]:
        return await TiersRepo.list_active(session)

    @staticmethod
    async def get_tier_progress(session: AsyncSession) -> TierProgress:
        current_tier = await TierService.get_current_tier(session)
        tickets_sold = await TicketsRepo.count_paid(session)
        next_tier = await TierService.get_next_tier(session, current_tier.tier_number)

        if next_tier is None:
            return TierProgress(
                current_tier=current_tier,
                next_tier=None,
                tickets_sold=tickets_sold,
                tickets_needed=0,
                progress=100.0,
                max_tier_reached=True,
            )

        return TierProgress(
            current_tier=current_tier,
            next_tier=next_tier,
            tickets_sold=tickets_sold,
            tickets_needed=max(0, next_tier.min_tickets - tickets_sold),
            progress=progress_percent(
                tickets_sold=tickets_sold,
                next_tier_min_tickets=next_tier.min_tickets,
            ),
            max_tier_reached=False,
        )

    @staticmethod
    async def check_tier_upgrade(session: AsyncSession, current_tier_number: int) -> Tier | None:
        current_tier = await TierService.get_current_tier(session)
        if current_tier.tier_number > current_tier_number:
            return current_tier
        return None

    @staticmethod
    async def expand_grid(
        session: AsyncSession,
        *,
        config: GridConfig,
        old_tier: Tier,
        new_tier: Tier,
        now_utc: datetime,
    ) -> GridExpansion:
        """Grows the grid to the new tier and re-centers every claimed cell.

        The caller must hold the lock on ``config``; the cell shift is one
        UPDATE statement so readers see either the old or the new layout.
        """
        if new_tier.grid_width < old_tier.grid_width or new_tier.grid_height < old_tier.grid_height:
            raise ValueError("grid dimensions can only grow")

        offset_x, offset_y = center_offset(
            old_width=old_tier.grid_width,
            old_height=old_tier.grid_height,
            new_width=new_tier.grid_width,
            new_height=new_tier.grid_height,
        )
        cells_shifted = await CodesRepo.shift_positions(
            session,
            offset_x=offset_x,
            offset_y=offset_y,
            now_utc=now_utc,
        )

        config.width = new_tier.grid_width
        config.height = new_tier.grid_height
        state_version = GridConfigRepo.bump_version(config, now_utc=now_utc)
        await session.flush()

        logger.info(
            "grid_expanded",
            old_tier=old_tier.tier_number,
            new_tier=new_tier.tier_number,
            width=config.width,
            height=config.height,
            offset_x=offset_x,
            offset_y=offset_y,
            cells_shifted=cells_shifted,
            state_version=state_version,
        )
        return GridExpansion(
            old_width=old_tier.grid_width,
            old_height=old_tier.grid_height,
            new_width=new_tier.grid_width,
            new_height=new_tier.grid_height,
            offset_x=offset_x,
            offset_y=offset_y,
            cells_shifted=cells_shifted,
            state_version=state_version,
        )

    @staticmethod
    async def upgrade_tier(session: AsyncSession, *, new_tier: Tier, now_utc: datetime) -> TierUpgradeResult:
        # The config row lock serializes racing upgrades; the loser re-reads the
        # grown dimensions and returns a no-op.
        config = await GridConfigRepo.get_for_update(session)
        if config is None:
            raise GridConfigMissingError

        old_tier = await TiersRepo.get_by_dimensions(session, width=config.width, height=config.height)
        if old_tier is None:
            raise TierNotFoundError(f"no tier matches grid {config.width}x{config.height}")

        if new_tier.tier_number <= old_tier.tier_number:
            return TierUpgradeResult(
                upgraded=False,
                old_tier=old_tier,
                reason="new_tier_not_higher",
            )

        expansion = await TierService.expand_grid(
            session,
            config=config,
            old_tier=old_tier,
            new_tier=new_tier,
            now_utc=now_utc,
        )
        return TierUpgradeResult(
            upgraded=True,
            old_tier=old_tier,
            new_tier=new_tier,
            expansion=expansion,
        )

    @staticmethod
    async def evaluate_upgrade(
        session: AsyncSession,
        *,
        previous_tier_number: int,
        now_utc: datetime,
    ) -> TierUpgradeResult:
        # Count under the config lock so two confirmations crossing the same
        # threshold cannot both observe the pre-threshold total.
        if await GridConfigRepo.get_for_update(session) is None:
            raise GridConfigMissingError
        new_tier = await TierService.check_tier_upgrade(session, previous_tier_number)
        if new_tier is None:
            return TierUpgradeResult(upgraded=False, reason="threshold_not_crossed")
        return await TierService.upgrade_tier(session, new_tier=new_tier, now_utc=now_utc)

    @staticmethod
    async def sync_grid_to_current_tier(session: AsyncSession, *, now_utc: datetime) -> TierUpgradeResult:
        """Expands the grid if it lags behind the tier implied by the paid-ticket count."""
        current_tier = await TierService.get_current_tier(session)
        return await TierService.upgrade_tier(session, new_tier=current_tier, now_utc=now_utc)
