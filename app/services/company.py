"""CompanyService: company listing and creation for the routes.

Rule: No direct SQL, no HTTP. Driver failures leave as BackendError.
"""

import structlog

from app.core.backend import BackendClient, run_backend_call
from app.models.schemas import CompanyCreate
from app.repositories import company as company_repo

logger = structlog.get_logger(__name__)


async def list_companies(backend: BackendClient) -> list[dict]:
    async def _query() -> list[dict]:
        pool = await backend.get_pool()
        return await company_repo.list_companies(pool)

    companies = await run_backend_call("company_service.list", _query())
    logger.info("company_service.list.fetched", total=len(companies))
    return companies


async def create_company(backend: BackendClient, body: CompanyCreate) -> dict:
    """Insert a company and return the stored row."""

    async def _query() -> dict:
        pool = await backend.get_pool()
        return await company_repo.insert_company(
            pool,
            body.name,
            body.primary_color,
            contact_email=body.contact_email,
            contact_phone=body.contact_phone,
            website=body.website,
        )

    company = await run_backend_call("company_service.create", _query())
    logger.info("company_service.created", company_id=company["id"])
    return company
