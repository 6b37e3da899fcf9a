"""create_profiles_table

Revision ID: 5d1c8e2a7f40
Revises:
Create Date: 2026-10-12 09:14:52.410233

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5d1c8e2a7f40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create profiles table keyed by the identity provider uid."""
    op.create_table(
        "profiles",
        sa.Column("uid", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        sa.Column("bio", sa.Text(), nullable=False, server_default=""),
        sa.Column("avatar_url", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("theme", sa.String(length=10), nullable=False, server_default="light"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "role IN ('admin', 'user', 'editor', 'manager', 'viewer')",
            name="ck_profiles_role",
        ),
        sa.CheckConstraint("theme IN ('light', 'dark')", name="ck_profiles_theme"),
        sa.PrimaryKeyConstraint("uid"),
    )
    op.create_index("ix_profiles_name", "profiles", ["name"], unique=False)


def downgrade() -> None:
    """Drop profiles table."""
    op.drop_index("ix_profiles_name", table_name="profiles")
    op.drop_table("profiles")
