from __future__ import annotations

from decimal import Decimal

from sqlalchemy import BOOLEAN, CheckConstraint, Index, Integer, Numeric, SmallInteger, text
from sqlalchemy.orm import Mapped, mapped_column

from fresq.db.models.base import Base


class Tier(Base):
    __tablename__ = "tiers"
    __table_args__ = (
        CheckConstraint("min_tickets >= 0", name="ck_tiers_min_tickets_non_negative"),
        CheckConstraint(
            "max_tickets IS NULL OR max_tickets >= min_tickets",
            name="ck_tiers_ticket_range",
        ),
        CheckConstraint("grid_width > 0 AND grid_height > 0", name="ck_tiers_grid_positive"),
        Index("idx_tiers_dimensions", "grid_width", "grid_height"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tier_number: Mapped[int] = mapped_column(SmallInteger, unique=True, nullable=False)
    min_tickets: Mapped[int] = mapped_column(Integer, nullable=False)
    max_tickets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    grid_width: Mapped[int] = mapped_column(Integer, nullable=False)
    grid_height: Mapped[int] = mapped_column(Integer, nullable=False)
    prize_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("true"))
