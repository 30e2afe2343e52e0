"""Request-scoped backend client.

One BackendClient is built per request by the get_backend_client dependency,
bound to that request's credentials. Routes take it via Depends so tests can
swap it with app.dependency_overrides.

run_backend_call is the single place where driver failures become
BackendError; services wrap every repository call in it.
"""

from collections.abc import Awaitable, Callable
from typing import TypeVar

import asyncpg
import structlog
from fastapi import Request

from app.core.auth import SessionAuth, extract_access_token
from app.core.constants import BackendErrorCodes
from app.core.db import get_db_pool
from app.core.errors import BackendError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

PoolFactory = Callable[[], Awaitable[asyncpg.Pool]]


class BackendClient:
    """Session-aware handle on Supabase auth and the Postgres store."""

    def __init__(self, access_token: str | None, pool_factory: PoolFactory = get_db_pool) -> None:
        self.auth = SessionAuth(access_token)
        self._pool_factory = pool_factory

    async def get_pool(self) -> asyncpg.Pool:
        # Resolved lazily so unauthenticated requests never touch the database.
        return await self._pool_factory()


async def get_backend_client(request: Request) -> BackendClient:
    """FastAPI dependency: a backend client bound to the request's session."""
    token = extract_access_token(request.headers.get("Authorization"), request.cookies)
    return BackendClient(token)


async def run_backend_call(event: str, coro: Awaitable[T]) -> T:
    """Await a repository call, mapping driver failures to BackendError.

    event prefixes the log lines, e.g. "project_service.get".
    """
    try:
        return await coro
    except BackendError as exc:
        logger.info(f"{event}.failed", code=exc.code, error=exc.message)
        raise
    except asyncpg.PostgresError as exc:
        logger.warning(f"{event}.db_error", sqlstate=exc.sqlstate, error=str(exc))
        raise BackendError(
            str(exc),
            code=exc.sqlstate or BackendErrorCodes.UNKNOWN,
            details=getattr(exc, "detail", None),
            hint=getattr(exc, "hint", None),
        ) from exc
    except ValueError as exc:
        # asyncpg rejects arguments it cannot encode, e.g. a project id that is not a uuid
        logger.info(f"{event}.invalid_input", error=str(exc))
        raise BackendError(str(exc), code=BackendErrorCodes.INVALID_INPUT) from exc
    except (asyncpg.InterfaceError, OSError, TimeoutError) as exc:
        logger.warning(f"{event}.unavailable", error=str(exc))
        raise BackendError(
            str(exc) or type(exc).__name__, code=BackendErrorCodes.CONNECTION
        ) from exc
