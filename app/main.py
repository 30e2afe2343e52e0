from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.db import close_db_pools, get_db_pool
from app.core.errors import register_exception_handlers
from app.core.logging_setup import configure_logging
from app.core.middleware import RequestIDMiddleware

configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("app.startup", environment=settings.ENVIRONMENT)

    if not (settings.SUPABASE_JWT_SECRET or settings.jwks_url):
        logger.warning(
            "app.startup.auth_not_configured",
            hint="Set SUPABASE_JWT_SECRET or SUPABASE_URL; sessions cannot be verified without one",
        )

    try:
        pool = await get_db_pool()
        logger.info("db.connected", pool_size=pool.get_size())
    except Exception as e:
        logger.warning("db.connection_failed", error=str(e))

    yield

    logger.info("app.shutdown")
    await close_db_pools()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Projects API",
        description="Owner-scoped project and asset API backed by Supabase",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        max_age=3600,
    )

    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    from app.api import companies, projects

    app.include_router(projects.router, prefix="/api/projects", tags=["projects"])
    app.include_router(companies.router, prefix="/api/companies", tags=["companies"])

    @app.get("/health")
    async def health_check():
        """
        Liveness + readiness check.

        Returns 200 only when the database is reachable, 503 otherwise.
        """
        db_ok = False
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            db_ok = True
        except Exception as exc:
            logger.warning("health.db_unreachable", error=str(exc))

        body = {
            "status": "healthy" if db_ok else "degraded",
            "db": "ok" if db_ok else "unavailable",
        }
        http_status = status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=body, status_code=http_status)

    return app


app = create_app()
