"""
Error mapping for the HTTP layer.

ValidationError        -> 400 (also malformed requests)
AuthorizationError     -> 403
NotFoundError          -> 404
InvalidTransitionError -> 409
StoreUnavailableError  -> 503 (Retry-After)
HTTPException          -> its own status, same body shape
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from skillswap.shared.errors import (
    AuthorizationError,
    ErrorCode,
    InvalidTransitionError,
    NotFoundError,
    SkillSwapError,
    StoreUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ValidationError: 400,
    AuthorizationError: 403,
    NotFoundError: 404,
    InvalidTransitionError: 409,
    StoreUnavailableError: 503,
}


def status_for(exc: SkillSwapError) -> int:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


async def skillswap_error_handler(request: Request, exc: SkillSwapError) -> JSONResponse:
    status_code = status_for(exc)
    headers = {}
    if exc.retryable:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        headers["Retry-After"] = "1"
    else:
        logger.warning(f"{request.method} {request.url.path} -> {status_code} {exc.code.value}: {exc.detail}")
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and query params share the 400 validation shape."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = f"{location}: {first.get('msg', 'invalid input')}" if location else first.get("msg", "invalid input")
    logger.warning(f"{request.method} {request.url.path} -> 400 invalid_input: {detail}")
    error = ValidationError(ErrorCode.INVALID_INPUT, detail)
    return JSONResponse(status_code=400, content=error.to_dict())


HTTP_ERROR_BODIES = {
    401: ("authentication_error", ErrorCode.UNAUTHENTICATED),
    403: (AuthorizationError.kind, ErrorCode.HTTP_ERROR),
    404: (NotFoundError.kind, ErrorCode.ROUTE_NOT_FOUND),
    405: ("invalid_request", ErrorCode.METHOD_NOT_ALLOWED),
}


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework-raised errors (missing headers, unknown routes) in the shared body shape."""
    kind, code = HTTP_ERROR_BODIES.get(exc.status_code, ("error", ErrorCode.HTTP_ERROR))
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {code.value}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": kind, "code": code.value, "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SkillSwapError, skillswap_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
