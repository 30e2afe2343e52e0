"""ProjectRepository: all asyncpg queries for the projects table.

Rule: This file contains ONLY SQL. No HTTP, no auth. Driver errors
(asyncpg.PostgresError, connection errors) propagate to the caller; the
service layer turns them into BackendError. The only error raised here is
the single-row BackendError of fetch_project_with_assets.

All functions accept an asyncpg Pool as first argument so they are easy to
test with a real or mock pool.
"""

import asyncpg
import structlog

from app.core.constants import BackendErrorCodes, ErrorMessages, ProjectStatus
from app.core.errors import BackendError
from app.repositories import asset as asset_repo

logger = structlog.get_logger(__name__)

_PROJECT_COLUMNS = """
    id::text, user_id::text, company_id::text, name, status::text,
    address, style, stage, notes, persona_id::text,
    created_at, updated_at
"""


async def fetch_project_with_assets(
    pool: asyncpg.Pool,
    project_id: str,
    user_id: str,
) -> dict:
    """
    Fetch exactly one project owned by user_id, with its assets under "assets".

    Zero matches (missing, or owned by someone else) and multiple matches both
    raise BackendError with the PostgREST single-row code. project_id is
    passed to Postgres as-is; malformed ids surface as a driver error.
    """
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            f"""
            SELECT {_PROJECT_COLUMNS}
            FROM projects
            WHERE id = $1::uuid AND user_id = $2::uuid
            """,
            project_id,
            user_id,
        )
        if len(rows) != 1:
            raise BackendError(
                ErrorMessages.SINGLE_ROW,
                code=BackendErrorCodes.SINGLE_ROW,
                details=f"The result contains {len(rows)} rows",
            )
        project = dict(rows[0])
        project["assets"] = await asset_repo.fetch_assets_for_project(conn, project["id"])
    return project


async def list_projects_with_assets(
    pool: asyncpg.Pool,
    user_id: str,
) -> list[dict]:
    """
    List all projects belonging to a user, newest first, each with its assets.

    Returns an empty list (not None) when the user has no projects.
    """
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            f"""
            SELECT {_PROJECT_COLUMNS}
            FROM projects
            WHERE user_id = $1::uuid
            ORDER BY created_at DESC
            """,
            user_id,
        )
        projects = [dict(r) for r in rows]
        assets = await asset_repo.fetch_assets_for_projects(conn, [p["id"] for p in projects])
    for p in projects:
        p["assets"] = assets.get(p["id"], [])
    return projects


async def insert_project(
    pool: asyncpg.Pool,
    user_id: str,
    name: str,
    *,
    company_id: str | None = None,
    address: str | None = None,
    style: str | None = None,
    stage: str | None = None,
    notes: str | None = None,
) -> dict:
    """
    Insert a new project row in CREATED status and return it as a dict.

    id, created_at and updated_at come from column defaults.
    """
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO projects
                (user_id, company_id, name, status, address, style, stage, notes)
            VALUES ($1::uuid, $2::uuid, $3, $4::project_status, $5, $6, $7, $8)
            RETURNING {_PROJECT_COLUMNS}
            """,
            user_id,
            company_id,
            name,
            ProjectStatus.CREATED,
            address,
            style,
            stage,
            notes,
        )
    return dict(row)
