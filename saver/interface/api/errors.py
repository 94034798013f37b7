"""Maps domain and adapter errors to HTTP responses.

Every error body has the shape ``{"error": <code>, "message": <text>}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from saver.adapter.error import ProviderError
from saver.domain.error import (
    ConflictError,
    DomainError,
    InvalidVerificationCodeError,
    NotAuthorizedError,
    NotFoundError,
    RateLimitedError,
    TooManyAttemptsError,
    UnauthenticatedError,
    ValidationError,
)
from saver.util.jwt import JWTError

logger = logging.getLogger(__name__)

# Checked in order; subclasses before their bases
DOMAIN_ERROR_STATUS_MAP: list[tuple[type[DomainError], int, str]] = [
    (InvalidVerificationCodeError, 404, "invalid_verification_code"),
    (NotFoundError, 404, "not_found"),
    (ConflictError, 409, "conflict"),
    (NotAuthorizedError, 403, "not_authorized"),
    (UnauthenticatedError, 401, "unauthenticated"),
    (ValidationError, 400, "validation_failed"),
    (RateLimitedError, 429, "rate_limited"),
    (TooManyAttemptsError, 429, "too_many_attempts"),
]


def status_for(error: DomainError) -> tuple[int, str]:
    """HTTP status and error code for a domain error."""
    for error_type, status_code, code in DOMAIN_ERROR_STATUS_MAP:
        if isinstance(error, error_type):
            return status_code, code
    return 400, "domain_error"


def _body(code: str, message: str, **extra) -> dict:
    return {"error": code, "message": message, **extra}


async def handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, DomainError)
    status_code, code = status_for(exc)
    extra = {}
    headers = None
    if isinstance(exc, RateLimitedError):
        extra["wait_minutes"] = exc.wait_minutes
        headers = {"Retry-After": str(exc.wait_minutes * 60)}
    elif isinstance(exc, UnauthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=status_code,
        content=_body(code, str(exc), **extra),
        headers=headers,
    )


async def handle_jwt_error(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=_body("invalid_token", str(exc)),
        headers={"WWW-Authenticate": "Bearer"},
    )


async def handle_provider_error(request: Request, exc: Exception) -> JSONResponse:
    logger.warning(f"Upstream provider error on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content=_body("provider_error", str(exc)))


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers on app."""
    app.add_exception_handler(DomainError, handle_domain_error)
    app.add_exception_handler(JWTError, handle_jwt_error)
    app.add_exception_handler(ProviderError, handle_provider_error)
