import asyncio
import re
from typing import Any
from urllib.parse import unquote, urlparse

import asyncpg
import structlog

from app.core.config import settings

logger = structlog.get_logger(__name__)

_pool: asyncpg.Pool | None = None
_pool_lock = asyncio.Lock()


def _parse_db_url(url: str) -> dict[str, Any]:
    """Parse DATABASE_URL into asyncpg connection parameters.

    Strips SQLAlchemy driver prefixes (postgresql+asyncpg://, postgresql+psycopg://)
    because asyncpg does not accept a DSN with a driver suffix. Supabase passwords
    are frequently URL-encoded, so credentials are unquoted.
    """
    normalised = re.sub(r"^postgres(?:ql)?(\+\w+)?://", "postgresql://", url)
    parsed = urlparse(normalised)
    return {
        "host": parsed.hostname or "localhost",
        "port": parsed.port or 5432,
        "user": unquote(parsed.username) if parsed.username else "postgres",
        "password": unquote(parsed.password) if parsed.password else None,
        "database": parsed.path.lstrip("/") or "postgres",
    }


async def get_db_pool() -> asyncpg.Pool:
    """Return the shared asyncpg connection pool, creating it on first call.

    Double-checked locking keeps two concurrent first requests from each
    creating a pool.
    """
    global _pool

    if _pool is None:
        async with _pool_lock:
            if _pool is None:
                db_params = _parse_db_url(settings.DATABASE_URL)
                logger.info(
                    "db.pool.create",
                    host=db_params["host"],
                    port=db_params["port"],
                    min_size=settings.DB_POOL_MIN_SIZE,
                    max_size=settings.DB_POOL_MAX_SIZE,
                )
                _pool = await asyncpg.create_pool(
                    **db_params,
                    min_size=settings.DB_POOL_MIN_SIZE,
                    max_size=settings.DB_POOL_MAX_SIZE,
                )
                logger.info("db.pool.created", pool_size=_pool.get_size())
    return _pool  # type: ignore[return-value]


async def close_db_pools() -> None:
    """Close the asyncpg pool on application shutdown."""
    global _pool
    if _pool:
        logger.info("db.pool.closing", pool_size=_pool.get_size())
        await _pool.close()
        _pool = None
