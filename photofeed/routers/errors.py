"""
Domain error → HTTP status mapping.

The mapping is by error class only; no business logic lives here. Every
error body has the shape {"error": "<message>"}.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from photofeed.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    PhotofeedError,
    ValidationError,
)
from photofeed.schemas import ErrorResponse

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InternalError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def status_for(exc: PhotofeedError) -> int:
    for error_class, code in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error(code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=code, content={"error": message})


async def domain_error_handler(request: Request, exc: PhotofeedError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(code, "Internal error")
    logger.info("%s %s → %d: %s", request.method, request.url.path, code, exc)
    return _error(code, exc.detail)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Undecodable bodies and bad path/form values are 400, not FastAPI's 422."""
    problems = [
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    ]
    message = "; ".join(problems) or "Invalid request"
    logger.info("%s %s → 400: %s", request.method, request.url.path, message)
    return _error(status.HTTP_400_BAD_REQUEST, message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PhotofeedError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
