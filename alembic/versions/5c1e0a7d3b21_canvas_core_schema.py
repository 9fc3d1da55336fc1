"""canvas_core_schema

Revision ID: 5c1e0a7d3b21
Revises:
Create Date: 2026-10-19 10:00:00.000000
"""
import json
from collections.abc import Sequence
from decimal import Decimal

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "5c1e0a7d3b21"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

DEFAULT_PALETTE = [
    "#000000",
    "#FFFFFF",
    "#E53935",
    "#FB8C00",
    "#FDD835",
    "#43A047",
    "#00ACC1",
    "#1E88E5",
    "#8E24AA",
    "#6D4C41",
]

TIER_SEED = (
    # tier_number, min_tickets, max_tickets, grid_width, grid_height, prize_amount
    (0, 0, 999, 200, 200, Decimal("500.00")),
    (1, 1000, 4999, 300, 300, Decimal("2000.00")),
    (2, 5000, 19999, 500, 500, Decimal("10000.00")),
    (3, 20000, 49999, 700, 700, Decimal("30000.00")),
    (4, 50000, None, 1000, 1000, Decimal("100000.00")),
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("email", name="users_email_key"),
    )
    op.create_index("idx_users_created_at", "users", ["created_at"])

    op.create_table(
        "tiers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tier_number", sa.SmallInteger(), nullable=False),
        sa.Column("min_tickets", sa.Integer(), nullable=False),
        sa.Column("max_tickets", sa.Integer(), nullable=True),
        sa.Column("grid_width", sa.Integer(), nullable=False),
        sa.Column("grid_height", sa.Integer(), nullable=False),
        sa.Column("prize_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.CheckConstraint("min_tickets >= 0", name="ck_tiers_min_tickets_non_negative"),
        sa.CheckConstraint(
            "max_tickets IS NULL OR max_tickets >= min_tickets",
            name="ck_tiers_ticket_range",
        ),
        sa.CheckConstraint("grid_width > 0 AND grid_height > 0", name="ck_tiers_grid_positive"),
        sa.UniqueConstraint("tier_number", name="tiers_tier_number_key"),
    )
    op.create_index("idx_tiers_dimensions", "tiers", ["grid_width", "grid_height"])

    op.create_table(
        "grid_config",
        sa.Column("id", sa.SmallInteger(), primary_key=True),
        sa.Column("width", sa.Integer(), nullable=False),
        sa.Column("height", sa.Integer(), nullable=False),
        sa.Column("state_version", sa.BigInteger(), nullable=False, server_default=sa.text("0")),
        sa.Column("palette", postgresql.JSONB(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("id = 1", name="ck_grid_config_singleton"),
        sa.CheckConstraint("width > 0 AND height > 0", name="ck_grid_config_dimensions_positive"),
        sa.CheckConstraint("state_version >= 0", name="ck_grid_config_state_version_non_negative"),
        sa.CheckConstraint("jsonb_array_length(palette) = 10", name="ck_grid_config_palette_size"),
    )

    op.create_table(
        "codes",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("code", sa.String(8), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        sa.Column("cell_x", sa.Integer(), nullable=True),
        sa.Column("cell_y", sa.Integer(), nullable=True),
        sa.Column("color", sa.SmallInteger(), nullable=True),
        sa.Column("source", sa.String(16), nullable=False, server_default=sa.text("'purchased'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("source IN ('purchased','pack_bonus','referral')", name="ck_codes_source"),
        sa.CheckConstraint("(cell_x IS NULL) = (cell_y IS NULL)", name="ck_codes_position_pair"),
        sa.CheckConstraint("color IS NULL OR cell_x IS NOT NULL", name="ck_codes_color_requires_position"),
        sa.CheckConstraint("color IS NULL OR (color BETWEEN 1 AND 10)", name="ck_codes_color_range"),
        sa.CheckConstraint(
            "cell_x IS NULL OR (cell_x >= 0 AND cell_y >= 0)",
            name="ck_codes_position_non_negative",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.UniqueConstraint("code", name="codes_code_key"),
        sa.UniqueConstraint(
            "cell_x",
            "cell_y",
            name="uq_codes_cell_position",
            deferrable=True,
            initially="IMMEDIATE",
        ),
    )
    op.create_index("idx_codes_user_id", "codes", ["user_id"])
    op.create_index("idx_codes_created_at", "codes", ["created_at"])
    op.create_index(
        "idx_codes_painted",
        "codes",
        ["cell_x", "cell_y"],
        postgresql_where=sa.text("color IS NOT NULL"),
    )

    op.create_table(
        "tickets",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("order_id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        sa.Column("payment_provider", sa.String(32), nullable=False, server_default=sa.text("'manual'")),
        sa.Column("payment_session_id", sa.String(255), nullable=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("base_quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("bonus_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("tier_id", sa.Integer(), nullable=True),
        sa.Column("code_id", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refunded_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('pending','paid','refunded','cancelled')", name="ck_tickets_status"),
        sa.CheckConstraint("base_quantity >= 1", name="ck_tickets_base_quantity_positive"),
        sa.CheckConstraint("bonus_quantity >= 0", name="ck_tickets_bonus_quantity_non_negative"),
        sa.CheckConstraint("quantity = base_quantity + bonus_quantity", name="ck_tickets_quantity_sum"),
        sa.CheckConstraint("amount >= 0", name="ck_tickets_amount_non_negative"),
        sa.CheckConstraint("status <> 'paid' OR paid_at IS NOT NULL", name="ck_tickets_paid_has_paid_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["tier_id"], ["tiers.id"]),
        sa.ForeignKeyConstraint(["code_id"], ["codes.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("order_id", name="tickets_order_id_key"),
        sa.UniqueConstraint("payment_session_id", name="tickets_payment_session_id_key"),
    )
    op.create_index("idx_tickets_email_created", "tickets", ["email", "created_at"])
    op.create_index("idx_tickets_status", "tickets", ["status"])
    op.create_index("idx_tickets_created_at", "tickets", ["created_at"])

    tiers_table = sa.table(
        "tiers",
        sa.column("tier_number", sa.SmallInteger()),
        sa.column("min_tickets", sa.Integer()),
        sa.column("max_tickets", sa.Integer()),
        sa.column("grid_width", sa.Integer()),
        sa.column("grid_height", sa.Integer()),
        sa.column("prize_amount", sa.Numeric(12, 2)),
    )
    op.bulk_insert(
        tiers_table,
        [
            {
                "tier_number": tier_number,
                "min_tickets": min_tickets,
                "max_tickets": max_tickets,
                "grid_width": grid_width,
                "grid_height": grid_height,
                "prize_amount": prize_amount,
            }
            for tier_number, min_tickets, max_tickets, grid_width, grid_height, prize_amount in TIER_SEED
        ],
    )

    op.execute(
        sa.text(
            "INSERT INTO grid_config (id, width, height, state_version, palette) "
            "VALUES (1, 200, 200, 0, CAST(:palette AS JSONB))"
        ).bindparams(palette=json.dumps(DEFAULT_PALETTE))
    )


def downgrade() -> None:
    op.drop_index("idx_tickets_created_at", table_name="tickets")
    op.drop_index("idx_tickets_status", table_name="tickets")
    op.drop_index("idx_tickets_email_created", table_name="tickets")
    op.drop_table("tickets")

    op.drop_index("idx_codes_painted", table_name="codes")
    op.drop_index("idx_codes_created_at", table_name="codes")
    op.drop_index("idx_codes_user_id", table_name="codes")
    op.drop_table("codes")

    op.drop_table("grid_config")

    op.drop_index("idx_tiers_dimensions", table_name="tiers")
    op.drop_table("tiers")

    op.drop_index("idx_users_created_at", table_name="users")
    op.drop_table("users")
