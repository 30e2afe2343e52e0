"""Initial schema: companies, profiles, projects, assets

Revision ID: 001
Revises:
Create Date: 2026-10-19

- enums project_status, asset_type, asset_status (idempotent, Supabase may already have them)
- projects.updated_at maintained by trigger
- assets cascade-delete with their project
- profiles.id references auth.users only when the Supabase auth schema exists
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_ENUMS = {
    "project_status": ("CREATED", "UPLOADING", "UPLOADED", "PROCESSING", "COMPLETED", "FAILED"),
    "asset_type": ("image", "video"),
    "asset_status": ("pending", "processing", "complete", "failed"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*_ENUMS[name], name=name, create_type=False)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("NOW()"),
        nullable=False,
    )


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    for name, values in _ENUMS.items():
        labels = ", ".join(f"'{v}'" for v in values)
        op.execute(
            f"DO $$ BEGIN CREATE TYPE {name} AS ENUM ({labels}); "
            "EXCEPTION WHEN duplicate_object THEN null; END $$"
        )

    # companies
    op.create_table(
        "companies",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("logo_url", sa.Text, nullable=True),
        sa.Column("primary_color", sa.Text, nullable=False, server_default="#6366f1"),
        sa.Column("contact_email", sa.Text, nullable=True),
        sa.Column("contact_phone", sa.Text, nullable=True),
        sa.Column("website", sa.Text, nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    # profiles
    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("full_name", sa.Text, nullable=True),
        sa.Column("company_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("role", sa.Text, nullable=False, server_default="member"),
        _created_at(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.execute(
        """
        DO $$ BEGIN
            IF EXISTS (SELECT 1 FROM pg_namespace WHERE nspname = 'auth') THEN
                ALTER TABLE profiles
                    ADD CONSTRAINT profiles_id_fkey
                    FOREIGN KEY (id) REFERENCES auth.users(id) ON DELETE CASCADE;
            END IF;
        END $$
        """
    )

    # projects
    op.create_table(
        "projects",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("company_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column(
            "status",
            _enum("project_status"),
            nullable=False,
            server_default="CREATED",
        ),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("style", sa.Text, nullable=True),
        sa.Column("stage", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("persona_id", postgresql.UUID(as_uuid=True), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_projects_user_id_created_at", "projects", ["user_id", "created_at"])

    op.execute(
        """
        CREATE OR REPLACE FUNCTION update_updated_at_column() RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
        """
    )
    op.execute(
        """
        CREATE TRIGGER update_projects_updated_at
        BEFORE UPDATE ON projects
        FOR EACH ROW EXECUTE PROCEDURE update_updated_at_column()
        """
    )

    # assets
    op.create_table(
        "assets",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", _enum("asset_type"), nullable=False),
        sa.Column("provider", sa.Text, nullable=False),
        sa.Column("prompt", sa.Text, nullable=False),
        sa.Column("status", _enum("asset_status"), nullable=False, server_default="pending"),
        sa.Column("external_job_id", sa.Text, nullable=True),
        sa.Column("url", sa.Text, nullable=True),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "metadata",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        _created_at(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_assets_project_id_created_at", "assets", ["project_id", "created_at"])

    # Row Level Security. The API filters by owner itself and connects as the
    # table owner; the permissive policies keep Supabase's REST surface usable.
    for table in ("companies", "projects", "assets"):
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(
            f"CREATE POLICY allow_all_{table} ON {table} FOR ALL USING (true) WITH CHECK (true)"
        )


def downgrade() -> None:
    for table in ("assets", "projects", "companies"):
        op.execute(f"DROP POLICY IF EXISTS allow_all_{table} ON {table}")
    op.drop_table("assets")
    op.execute("DROP TRIGGER IF EXISTS update_projects_updated_at ON projects")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")
    op.drop_table("projects")
    op.drop_table("profiles")
    op.drop_table("companies")
    for name in reversed(list(_ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
