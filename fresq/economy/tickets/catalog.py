from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

SOLO_UNIT_PRICE = Decimal("2.00")


@dataclass(frozen=True, slots=True)
class PackSpec:
    pack_key: str
    label: str
    base_tickets: int
    bonus_tickets: int
    price: Decimal
    display_order: int

    @property
    def total_tickets(self) -> int:
        return self.base_tickets + self.bonus_tickets

    @property
    def discount_percent(self) -> int:
        if self.total_tickets == 1:
            return 0
        unit_price = self.price / self.total_tickets
        discount = (1 - unit_price / SOLO_UNIT_PRICE) * 100
        return int(discount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


PACKS: dict[str, PackSpec] = {
    "solo": PackSpec(
        pack_key="solo",
        label="Solo",
        base_tickets=1,
        bonus_tickets=0,
        price=Decimal("2.00"),
        display_order=1,
    ),
    "mini": PackSpec(
        pack_key="mini",
        label="Mini pack",
        base_tickets=3,
        bonus_tickets=0,
        price=Decimal("5.00"),
        display_order=2,
    ),
    "medium": PackSpec(
        pack_key="medium",
        label="Medium pack",
        base_tickets=5,
        bonus_tickets=1,
        price=Decimal("9.00"),
        display_order=3,
    ),
    "mega": PackSpec(
        pack_key="mega",
        label="Mega pack",
        base_tickets=10,
        bonus_tickets=3,
        price=Decimal("17.00"),
        display_order=4,
    ),
    "ultra": PackSpec(
        pack_key="ultra",
        label="Ultra pack",
        base_tickets=20,
        bonus_tickets=8,
        price=Decimal("32.00"),
        display_order=5,
    ),
}


def get_pack(pack_key: str) -> PackSpec | None:
    return PACKS.get(pack_key.strip().lower())


def list_packs() -> list[PackSpec]:
    return sorted(PACKS.values(), key=lambda pack: pack.display_order)
