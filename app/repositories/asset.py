"""Repository queries for the assets table.

Functions take an asyncpg connection (not the pool) because asset reads
always ride on the connection that loaded the parent project rows.
"""

from __future__ import annotations

import asyncpg

_ASSET_COLUMNS = """
    id::text, project_id::text, type::text, provider, prompt, status::text,
    external_job_id, url, created_by::text, metadata, created_at
"""


async def fetch_assets_for_project(conn: asyncpg.Connection, project_id: str) -> list[dict]:
    """Return all assets of one project, oldest first. Empty list when none."""
    rows = await conn.fetch(
        f"""
        SELECT {_ASSET_COLUMNS}
        FROM assets
        WHERE project_id = $1::uuid
        ORDER BY created_at ASC
        """,
        project_id,
    )
    return [dict(r) for r in rows]


async def fetch_assets_for_projects(
    conn: asyncpg.Connection,
    project_ids: list[str],
) -> dict[str, list[dict]]:
    """
    Return assets grouped by project_id for a batch of projects.

    Every requested id is present in the result, mapped to [] when the
    project has no assets.
    """
    grouped: dict[str, list[dict]] = {pid: [] for pid in project_ids}
    if not project_ids:
        return grouped

    rows = await conn.fetch(
        f"""
        SELECT {_ASSET_COLUMNS}
        FROM assets
        WHERE project_id = ANY($1::uuid[])
        ORDER BY created_at ASC
        """,
        project_ids,
    )
    for r in rows:
        grouped.setdefault(r["project_id"], []).append(dict(r))
    return grouped
