"""add_profiles_rls_policies

Revision ID: 8a3e61f0c9b2
Revises: 5d1c8e2a7f40
Create Date: 2026-10-12 09:40:03.118764

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8a3e61f0c9b2"
down_revision: str | Sequence[str] | None = "5d1c8e2a7f40"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Add Row Level Security policies on profiles.

    The API connects with a service account that bypasses RLS; these
    policies apply to direct Supabase client connections only.
    """
    op.execute("ALTER TABLE profiles ENABLE ROW LEVEL SECURITY;")

    # SELECT: any authenticated user (dashboard lists all profiles)
    op.execute("""
        CREATE POLICY profiles_select ON profiles
            FOR SELECT USING (
                (SELECT auth.uid()) IS NOT NULL
            );
    """)
    # UPDATE: only the owner, and never into a role outside the allow-list
    op.execute("""
        CREATE POLICY profiles_update ON profiles
            FOR UPDATE USING (
                uid = (SELECT auth.uid())::text
            )
            WITH CHECK (
                uid = (SELECT auth.uid())::text
                AND role IN ('admin', 'user', 'editor', 'manager', 'viewer')
            );
    """)


def downgrade() -> None:
    """Remove profiles RLS policies."""
    op.execute("DROP POLICY IF EXISTS profiles_update ON profiles;")
    op.execute("DROP POLICY IF EXISTS profiles_select ON profiles;")
    op.execute("ALTER TABLE profiles DISABLE ROW LEVEL SECURITY;")
