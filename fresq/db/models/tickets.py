from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from fresq.db.models.base import Base


class Ticket(Base):
    __tablename__ = "tickets"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','paid','refunded','cancelled')",
            name="ck_tickets_status",
        ),
        CheckConstraint("base_quantity >= 1", name="ck_tickets_base_quantity_positive"),
        CheckConstraint("bonus_quantity >= 0", name="ck_tickets_bonus_quantity_non_negative"),
        CheckConstraint(
            "quantity = base_quantity + bonus_quantity",
            name="ck_tickets_quantity_sum",
        ),
        CheckConstraint("amount >= 0", name="ck_tickets_amount_non_negative"),
        CheckConstraint(
            "status <> 'paid' OR paid_at IS NOT NULL",
            name="ck_tickets_paid_has_paid_at",
        ),
        Index("idx_tickets_email_created", "email", "created_at"),
        Index("idx_tickets_status", "status"),
        Index("idx_tickets_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    user_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=True)
    payment_provider: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        server_default=text("'manual'"),
    )
    payment_session_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    base_quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    bonus_quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    tier_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("tiers.id"), nullable=True)
    code_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("codes.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
