from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fresq.db.models.tiers import Tier


def tier_as_dict(tier: Tier) -> dict[str, Any]:
    return {
        "id": tier.id,
        "tierNumber": tier.tier_number,
        "minTickets": tier.min_tickets,
        "maxTickets": tier.max_tickets,
        "gridWidth": tier.grid_width,
        "gridHeight": tier.grid_height,
        "prizeAmount": str(tier.prize_amount),
    }


@dataclass(frozen=True, slots=True)
class GridExpansion:
    old_width: int
    old_height: int
    new_width: int
    new_height: int
    offset_x: int
    offset_y: int
    cells_shifted: int
    state_version: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "oldDimensions": {"width": self.old_width, "height": self.old_height},
            "newDimensions": {"width": self.new_width, "height": self.new_height},
            "offset": {"x": self.offset_x, "y": self.offset_y},
            "cellsShifted": self.cells_shifted,
            "stateVersion": self.state_version,
        }


@dataclass(frozen=True, slots=True)
class TierUpgradeResult:
    upgraded: bool
    old_tier: Tier | None = None
    new_tier: Tier | None = None
    expansion: GridExpansion | None = None
    reason: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "upgraded": self.upgraded,
            "oldTier": tier_as_dict(self.old_tier) if self.old_tier is not None else None,
            "newTier": tier_as_dict(self.new_tier) if self.new_tier is not None else None,
            "expansion": self.expansion.as_dict() if self.expansion is not None else None,
        }


@dataclass(frozen=True, slots=True)
class TierProgress:
    current_tier: Tier
    next_tier: Tier | None
    tickets_sold: int
    tickets_needed: int
    progress: float
    max_tier_reached: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "currentTier": tier_as_dict(self.current_tier),
            "nextTier": tier_as_dict(self.next_tier) if self.next_tier is not None else None,
            "ticketsSold": self.tickets_sold,
            "ticketsNeeded": self.tickets_needed,
            "progress": self.progress,
            "maxTierReached": self.max_tier_reached,
        }
