from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from fresq.grid.types import TierUpgradeResult


@dataclass(slots=True)
class TicketCreateResult:
    order_id: str
    email: str
    amount: Decimal
    quantity: int
    base_quantity: int
    bonus_quantity: int
    status: str
    tier_number: int
    pack_key: str | None = None


@dataclass(slots=True)
class TicketConfirmResult:
    order_id: str
    status: str
    codes: list[str]
    purchased_codes: list[str]
    bonus_codes: list[str]
    tier_upgrade: TierUpgradeResult = field(
        default_factory=lambda: TierUpgradeResult(upgraded=False),
    )


@dataclass(slots=True)
class TicketCancelResult:
    order_id: str
    previous_status: str
    status: str
    deleted_code: str | None = None


@dataclass(slots=True)
class TicketStats:
    pending: int
    paid: int
    refunded: int
    cancelled: int
    total: int
    total_revenue: Decimal
