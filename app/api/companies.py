"""Companies router: HTTP layer only.

Any signed-in user may list or create companies. Unlike the projects routes,
backend failures are not passed through: the client only ever sees
"Internal Server Error".
"""

from collections.abc import Awaitable
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException

from app.api.session import require_user
from app.core.backend import BackendClient, get_backend_client
from app.core.constants import ErrorMessages
from app.core.errors import BackendError
from app.models.schemas import Company, CompanyCreate, MessageResponse
from app.services import company as company_service

logger = structlog.get_logger(__name__)
router = APIRouter()

T = TypeVar("T")

_ERROR_RESPONSES: dict = {
    401: {"model": MessageResponse, "description": "No valid session"},
    500: {"model": MessageResponse, "description": "Database failure"},
}


async def _run_service_call(action: str, coro: Awaitable[T]) -> T:
    try:
        return await coro
    except BackendError as exc:
        logger.error(f"companies.{action}.error", code=exc.code, error=exc.message)
        raise HTTPException(status_code=500, detail=ErrorMessages.INTERNAL)


@router.get("", response_model=list[Company], responses=_ERROR_RESPONSES)
async def list_companies(backend: BackendClient = Depends(get_backend_client)):
    """List every company, ordered by name."""
    await require_user(backend)
    companies = await _run_service_call("list", company_service.list_companies(backend))
    return [Company(**c) for c in companies]


@router.post("", response_model=Company, responses=_ERROR_RESPONSES)
async def create_company(
    body: CompanyCreate,
    backend: BackendClient = Depends(get_backend_client),
):
    """Create a company; primary_color falls back to the default brand colour."""
    user = await require_user(backend)
    logger.info("companies.create", user_id=user.id, name=body.name)
    company = await _run_service_call("create", company_service.create_company(backend, body))
    return Company(**company)
