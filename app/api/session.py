"""Shared session check for API routes."""

from fastapi import HTTPException

from app.core.backend import BackendClient
from app.core.constants import ErrorMessages
from app.models.schemas import SessionUser


async def require_user(backend: BackendClient) -> SessionUser:
    """
    Return the signed-in user or raise 401.

    Runs before any query so an anonymous request never reaches the database.
    """
    user = await backend.auth.get_user()
    if user is None:
        raise HTTPException(status_code=401, detail=ErrorMessages.UNAUTHORIZED)
    return user
