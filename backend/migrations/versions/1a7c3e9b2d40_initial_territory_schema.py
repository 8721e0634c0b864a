"""Initial territory assignment schema.

Revision ID: 1a7c3e9b2d40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "1a7c3e9b2d40"
down_revision = None
branch_labels = None
depends_on = None

_OPEN_ASSIGNMENT_PREDICATE = "status = 'assigned' AND returned_at IS NULL"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    existing_tables = set(sa.inspect(bind).get_table_names())

    if "zones" not in existing_tables:
        op.create_table(
            "zones",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("name"),
        )

    if "territories" not in existing_tables:
        op.create_table(
            "territories",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("zone_id", sa.Uuid(), nullable=True),
            sa.Column("google_maps_link", sa.String(), nullable=True),
            sa.Column("danger_level", sa.String(), nullable=True),
            sa.Column("warnings", sa.String(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["zone_id"], ["zones.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_territories_name"), "territories", ["name"])
        op.create_index(op.f("ix_territories_zone_id"), "territories", ["zone_id"])

    if "publisher_roles" not in existing_tables:
        op.create_table(
            "publisher_roles",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("max_territories", sa.Integer(), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("name"),
        )

    if "publishers" not in existing_tables:
        op.create_table(
            "publishers",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("role_id", sa.Uuid(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["role_id"], ["publisher_roles.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_publishers_name"), "publishers", ["name"])
        op.create_index(op.f("ix_publishers_role_id"), "publishers", ["role_id"])

    if "assigned_territories" not in existing_tables:
        op.create_table(
            "assigned_territories",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("territory_id", sa.Uuid(), nullable=False),
            sa.Column("publisher_id", sa.Uuid(), nullable=False),
            sa.Column("assigned_at", sa.DateTime(), nullable=False),
            sa.Column("expires_at", sa.DateTime(), nullable=True),
            sa.Column("status", sa.String(), nullable=False, server_default="assigned"),
            sa.Column("returned_at", sa.DateTime(), nullable=True),
            sa.Column("token", sa.String(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(["territory_id"], ["territories.id"]),
            sa.ForeignKeyConstraint(["publisher_id"], ["publishers.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        for column in ("territory_id", "publisher_id", "assigned_at", "expires_at", "status"):
            op.create_index(
                op.f(f"ix_assigned_territories_{column}"),
                "assigned_territories",
                [column],
            )
        op.create_index(
            op.f("ix_assigned_territories_token"),
            "assigned_territories",
            ["token"],
            unique=True,
        )
        op.create_index(
            "uq_assigned_territories_one_open_per_territory",
            "assigned_territories",
            ["territory_id"],
            unique=True,
            postgresql_where=sa.text(_OPEN_ASSIGNMENT_PREDICATE),
            sqlite_where=sa.text(_OPEN_ASSIGNMENT_PREDICATE),
        )

    if "app_settings" not in existing_tables:
        op.create_table(
            "app_settings",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("territory_link_days", sa.Integer(), nullable=False, server_default="30"),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
            sa.CheckConstraint("territory_link_days > 0", name="ck_app_settings_link_days"),
        )

    if "public_territory_access" not in existing_tables:
        op.create_table(
            "public_territory_access",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("token", sa.String(), nullable=False),
            sa.Column("assignment_id", sa.Uuid(), nullable=False),
            sa.Column("territory_id", sa.Uuid(), nullable=False),
            sa.Column("territory_name", sa.String(), nullable=False),
            sa.Column("google_maps_link", sa.String(), nullable=True),
            sa.Column("danger_level", sa.String(), nullable=True),
            sa.Column("warnings", sa.String(), nullable=True),
            sa.Column("publisher_id", sa.Uuid(), nullable=False),
            sa.Column("publisher_name", sa.String(), nullable=False),
            sa.Column("status", sa.String(), nullable=False, server_default="assigned"),
            sa.Column("expires_at", sa.DateTime(), nullable=True),
            sa.Column("returned_at", sa.DateTime(), nullable=True),
            sa.Column("is_expired", sa.Boolean(), nullable=False, server_default=sa.false()),
            *_timestamps(),
            sa.ForeignKeyConstraint(["assignment_id"], ["assigned_territories.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            op.f("ix_public_territory_access_token"),
            "public_territory_access",
            ["token"],
            unique=True,
        )
        for column in ("assignment_id", "territory_id", "publisher_id", "expires_at", "is_expired"):
            op.create_index(
                op.f(f"ix_public_territory_access_{column}"),
                "public_territory_access",
                [column],
            )

    if "administrators" not in existing_tables:
        op.create_table(
            "administrators",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("auth_id", sa.String(), nullable=False),
            sa.Column("email", sa.String(), nullable=True),
            sa.Column("name", sa.String(), nullable=True),
            sa.Column("role", sa.String(), nullable=False, server_default="admin"),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            op.f("ix_administrators_auth_id"),
            "administrators",
            ["auth_id"],
            unique=True,
        )
        op.create_index(op.f("ix_administrators_email"), "administrators", ["email"])

    if "audit_entries" not in existing_tables:
        op.create_table(
            "audit_entries",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("actor_id", sa.Uuid(), nullable=True),
            sa.Column("actor_type", sa.String(), nullable=False, server_default="admin"),
            sa.Column("action", sa.String(), nullable=False),
            sa.Column("target_type", sa.String(), nullable=False, server_default=""),
            sa.Column("target_id", sa.Uuid(), nullable=True),
            sa.Column("payload", sa.JSON(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        for column in ("actor_id", "actor_type", "action", "created_at"):
            op.create_index(op.f(f"ix_audit_entries_{column}"), "audit_entries", [column])


def downgrade() -> None:
    for table in (
        "audit_entries",
        "administrators",
        "public_territory_access",
        "app_settings",
        "assigned_territories",
        "publishers",
        "publisher_roles",
        "territories",
        "zones",
    ):
        op.drop_table(table)
