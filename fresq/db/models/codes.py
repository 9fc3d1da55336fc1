from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from fresq.core.codes import CODE_LENGTH
from fresq.db.models.base import Base

CODE_SOURCES = ("purchased", "pack_bonus", "referral")


class Code(Base):
    __tablename__ = "codes"
    __table_args__ = (
        CheckConstraint(
            "source IN ('purchased','pack_bonus','referral')",
            name="ck_codes_source",
        ),
        CheckConstraint(
            "(cell_x IS NULL) = (cell_y IS NULL)",
            name="ck_codes_position_pair",
        ),
        CheckConstraint(
            "color IS NULL OR cell_x IS NOT NULL",
            name="ck_codes_color_requires_position",
        ),
        CheckConstraint(
            "color IS NULL OR (color BETWEEN 1 AND 10)",
            name="ck_codes_color_range",
        ),
        CheckConstraint(
            "cell_x IS NULL OR (cell_x >= 0 AND cell_y >= 0)",
            name="ck_codes_position_non_negative",
        ),
        # Deferrable so the bulk expansion shift is checked once per statement.
        UniqueConstraint(
            "cell_x",
            "cell_y",
            name="uq_codes_cell_position",
            deferrable=True,
            initially="IMMEDIATE",
        ),
        Index("idx_codes_user_id", "user_id"),
        Index("idx_codes_created_at", "created_at"),
        Index(
            "idx_codes_painted",
            "cell_x",
            "cell_y",
            postgresql_where=text("color IS NOT NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(CODE_LENGTH), unique=True, nullable=False)
    user_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=True)
    cell_x: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cell_y: Mapped[int | None] = mapped_column(Integer, nullable=True)
    color: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    source: Mapped[str] = mapped_column(String(16), nullable=False, server_default=text("'purchased'"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
