"""CompanyRepository: asyncpg queries for the companies table.

Rule: This file contains ONLY SQL. Driver errors propagate; the service
layer turns them into BackendError.

Companies are shared reference data, not owned by a user, so nothing here
filters by user_id.
"""

import asyncpg

_COMPANY_COLUMNS = """
    id::text, name, logo_url, primary_color,
    contact_email, contact_phone, website, created_at
"""


async def list_companies(pool: asyncpg.Pool) -> list[dict]:
    """All companies ordered by name."""
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            f"""
            SELECT {_COMPANY_COLUMNS}
            FROM companies
            ORDER BY name ASC
            """
        )
    return [dict(r) for r in rows]


async def insert_company(
    pool: asyncpg.Pool,
    name: str,
    primary_color: str,
    *,
    contact_email: str | None = None,
    contact_phone: str | None = None,
    website: str | None = None,
) -> dict:
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO companies
                (name, primary_color, contact_email, contact_phone, website)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING {_COMPANY_COLUMNS}
            """,
            name,
            primary_color,
            contact_email,
            contact_phone,
            website,
        )
    return dict(row)
