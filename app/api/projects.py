"""Projects router: HTTP layer only.

Rule: No business logic here. Resolve the session, call ProjectService,
shape the response. The backend client is injected via get_backend_client
so it can be replaced in tests.
"""

import json
from collections.abc import Awaitable
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException

from app.api.session import require_user
from app.core.backend import BackendClient, get_backend_client
from app.core.errors import BackendError
from app.models.schemas import (
    Asset,
    DataResponse,
    MessageResponse,
    Project,
    ProjectCreate,
    ProjectWithAssets,
)
from app.services import project as project_service

logger = structlog.get_logger(__name__)
router = APIRouter()

T = TypeVar("T")

_ERROR_RESPONSES: dict = {
    401: {"model": MessageResponse, "description": "No valid session"},
    500: {"model": MessageResponse, "description": "Lookup or database failure"},
}


async def _run_service_call(action: str, coro: Awaitable[T]) -> T:
    """Translate backend failures to 500 with the backend's message verbatim."""
    try:
        return await coro
    except BackendError as exc:
        logger.warning(f"projects.{action}.error", code=exc.code, error=exc.message)
        raise HTTPException(status_code=500, detail=exc.message)


def _serialize_asset(a: dict) -> Asset:
    """asyncpg returns jsonb as text unless a codec is registered."""
    metadata_raw = a.get("metadata")
    if isinstance(metadata_raw, dict):
        metadata = metadata_raw
    elif isinstance(metadata_raw, str):
        try:
            parsed = json.loads(metadata_raw)
            metadata = parsed if isinstance(parsed, dict) else {}
        except json.JSONDecodeError:
            metadata = {}
    else:
        metadata = {}
    return Asset(**{**a, "metadata": metadata})


def _serialize_project(p: dict) -> ProjectWithAssets:
    assets = [_serialize_asset(a) for a in p.get("assets") or []]
    return ProjectWithAssets(**{**p, "assets": assets})


@router.get("", response_model=DataResponse[list[ProjectWithAssets]], responses=_ERROR_RESPONSES)
async def list_projects(backend: BackendClient = Depends(get_backend_client)):
    """List the current user's projects, newest first, with their assets."""
    user = await require_user(backend)
    projects = await _run_service_call("list", project_service.list_projects(backend, user.id))
    return DataResponse[list[ProjectWithAssets]](data=[_serialize_project(p) for p in projects])


@router.post("", response_model=Project, status_code=201, responses=_ERROR_RESPONSES)
async def create_project(
    body: ProjectCreate,
    backend: BackendClient = Depends(get_backend_client),
):
    """Create a project in CREATED status owned by the current user."""
    user = await require_user(backend)
    logger.info("projects.create", user_id=user.id, name=body.name)
    project = await _run_service_call(
        "create", project_service.create_project(backend, user.id, body)
    )
    return Project(**project)


@router.get(
    "/{project_id}",
    response_model=DataResponse[ProjectWithAssets],
    responses=_ERROR_RESPONSES,
)
async def get_project(
    project_id: str,
    backend: BackendClient = Depends(get_backend_client),
):
    """
    Get one project with its assets.

    401 without a session; no query is issued in that case. A project that
    does not exist or belongs to another user is reported as 500 with the
    backend's message, the same as a database failure.
    """
    user = await require_user(backend)
    project = await _run_service_call(
        "get", project_service.get_project(backend, project_id, user.id)
    )
    return DataResponse[ProjectWithAssets](data=_serialize_project(project))
