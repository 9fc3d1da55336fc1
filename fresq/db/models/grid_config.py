from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Integer, SmallInteger, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from fresq.db.models.base import Base

GRID_CONFIG_ID = 1


class GridConfig(Base):
    __tablename__ = "grid_config"
    __table_args__ = (
        CheckConstraint("id = 1", name="ck_grid_config_singleton"),
        CheckConstraint("width > 0 AND height > 0", name="ck_grid_config_dimensions_positive"),
        CheckConstraint("state_version >= 0", name="ck_grid_config_state_version_non_negative"),
        CheckConstraint("jsonb_array_length(palette) = 10", name="ck_grid_config_palette_size"),
    )

    id: Mapped[int] = mapped_column(SmallInteger, primary_key=True, default=GRID_CONFIG_ID)
    width: Mapped[int] = mapped_column(Integer, nullable=False)
    height: Mapped[int] = mapped_column(Integer, nullable=False)
    state_version: Mapped[int] = mapped_column(BigInteger, nullable=False, server_default=text("0"))
    palette: Mapped[list[str]] = mapped_column(JSONB, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
