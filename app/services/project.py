"""ProjectService: orchestrates project reads and writes for the routes.

Rule: No direct SQL, no HTTP. DB access goes through app.repositories.project.
Every driver failure leaves this module as BackendError so routes only have
one exception type to translate.
"""

import structlog

from app.core.backend import BackendClient, run_backend_call
from app.models.schemas import ProjectCreate
from app.repositories import project as project_repo

logger = structlog.get_logger(__name__)


async def get_project(backend: BackendClient, project_id: str, user_id: str) -> dict:
    """
    Fetch one project with its assets, scoped to its owner.

    Raises BackendError when the project is missing, not owned by the user,
    or the database call fails. The three cases are not distinguished.
    """

    async def _query() -> dict:
        pool = await backend.get_pool()
        return await project_repo.fetch_project_with_assets(pool, project_id, user_id)

    project = await run_backend_call("project_service.get", _query())
    logger.info(
        "project_service.get.fetched",
        project_id=project_id,
        assets=len(project.get("assets") or []),
    )
    return project


async def list_projects(backend: BackendClient, user_id: str) -> list[dict]:
    """Return all projects for a user, newest first, each with its assets."""

    async def _query() -> list[dict]:
        pool = await backend.get_pool()
        return await project_repo.list_projects_with_assets(pool, user_id)

    projects = await run_backend_call("project_service.list", _query())
    logger.info("project_service.list.fetched", user_id=user_id, total=len(projects))
    return projects


async def create_project(backend: BackendClient, user_id: str, body: ProjectCreate) -> dict:
    """Insert a project in CREATED status for user_id and return the stored row."""

    async def _query() -> dict:
        pool = await backend.get_pool()
        return await project_repo.insert_project(
            pool,
            user_id,
            body.name,
            company_id=body.company_id,
            address=body.address,
            style=body.style,
            stage=body.stage,
            notes=body.notes,
        )

    project = await run_backend_call("project_service.create", _query())
    logger.info("project_service.created", project_id=project["id"], user_id=user_id)
    return project
