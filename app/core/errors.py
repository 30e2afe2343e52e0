"""Backend error type and the JSON error envelope used by every route.

Errors leave the API as ``{"message": ...}`` rather than FastAPI's default
``{"detail": ...}`` so that clients of the original web app keep working.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.constants import BackendErrorCodes, ErrorMessages

logger = structlog.get_logger(__name__)


class BackendError(Exception):
    """A failed read or write against the project store.

    Shaped like a PostgREST error so the message, not the kind, is what
    reaches the client.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = BackendErrorCodes.UNKNOWN,
        details: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint

    def __repr__(self) -> str:
        return f"BackendError(code={self.code!r}, message={self.message!r})"


def message_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = message_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("request.invalid", path=request.url.path, errors=len(exc.errors()))
    return message_response(
        422, ErrorMessages.INVALID_BODY, errors=jsonable_encoder(exc.errors())
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "request.error",
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    response = message_response(500, ErrorMessages.INTERNAL)
    # the request-id middleware never sees responses built by ServerErrorMiddleware
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
