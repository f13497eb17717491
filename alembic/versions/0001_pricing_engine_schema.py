"""Bungalows, reservations, price rules and extra services.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    bungalow_status = sa.Enum("ACTIVE", "PASSIVE", name="bungalowstatus")
    reservation_status = sa.Enum(
        "PENDING",
        "CONFIRMED",
        "CHECKED_IN",
        "CHECKED_OUT",
        "CANCELLED",
        name="reservationstatus",
    )
    price_rule_kind = sa.Enum(
        "BASE",
        "SEASON",
        "WEEKEND",
        "HOLIDAY",
        "CUSTOM",
        "PER_PERSON",
        "MIN_NIGHTS",
        name="pricerulekind",
    )
    amount_type = sa.Enum("FIXED", "PERCENTAGE", name="amounttype")
    rule_scope = sa.Enum("GLOBAL", "UNIT", name="rulescope")
    extra_charge_type = sa.Enum("FLAT", "PER_NIGHT", "PER_GUEST", name="extrachargetype")

    op.create_table(
        "bungalows",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "price_includes_tax",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column(
            "included_guests", sa.Integer(), nullable=False, server_default="2"
        ),
        sa.Column(
            "status", bungalow_status, nullable=False, server_default="ACTIVE"
        ),
        *_timestamps(),
    )

    op.create_table(
        "reservations",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "bungalow_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("bungalows.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("guests", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "status", reservation_status, nullable=False, server_default="PENDING"
        ),
        *_timestamps(),
        sa.CheckConstraint("check_in < check_out", name="ck_reservation_dates"),
    )
    op.create_index(
        "ix_reservations_bungalow_dates",
        "reservations",
        ["bungalow_id", "check_in", "check_out"],
    )

    op.create_table(
        "price_rules",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("kind", price_rule_kind, nullable=False),
        sa.Column("amount_type", amount_type, nullable=False),
        sa.Column("amount_value", sa.Numeric(12, 4), nullable=False),
        sa.Column("scope", rule_scope, nullable=False),
        sa.Column(
            "bungalow_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("bungalows.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("date_start", sa.Date(), nullable=True),
        sa.Column("date_end", sa.Date(), nullable=True),
        sa.Column("weekday_mask", sa.Integer(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint(
            "(scope = 'UNIT' AND bungalow_id IS NOT NULL)"
            " OR (scope = 'GLOBAL' AND bungalow_id IS NULL)",
            name="ck_price_rule_scope",
        ),
    )

    op.create_table(
        "extra_services",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("code", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("charge_type", extra_charge_type, nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("extra_services")
    op.drop_table("price_rules")
    op.drop_index("ix_reservations_bungalow_dates", table_name="reservations")
    op.drop_table("reservations")
    op.drop_table("bungalows")
    bind = op.get_bind()
    for enum_name in (
        "extrachargetype",
        "rulescope",
        "amounttype",
        "pricerulekind",
        "reservationstatus",
        "bungalowstatus",
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
