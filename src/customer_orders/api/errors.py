"""Translation of internal errors into the public error shape.

Every failure a caller can see is rendered as ``{error, message, code}``.
The table below is the only place where internal exception types are mapped
to public codes; exception text never reaches the response body.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from customer_orders.api.schemas import ErrorResponse
from customer_orders.errors import (
    ConfigurationError,
    CredentialError,
    CustomerExists,
    CustomerNotFound,
    CustomerOrdersError,
    IdentityAssertionInvalid,
    InvalidRequest,
    MalformedCredential,
    MissingAuthorizationCode,
    MissingCredential,
    OrderNotFound,
    PersistenceError,
    ProviderNotConfigured,
    TokenError,
    TokenExchangeFailed,
)

logger = logging.getLogger(__name__)

_ERROR_TABLE: dict[type[CustomerOrdersError], tuple[str, str, int]] = {
    InvalidRequest: ("invalid_request", "invalid request", 400),
    CustomerNotFound: ("customer_not_found", "customer not found", 404),
    OrderNotFound: ("order_not_found", "order not found", 404),
    CustomerExists: (
        "customer_exists",
        "customer with this code already exists",
        409,
    ),
    PersistenceError: ("database_error", "database operation failed", 500),
    ConfigurationError: ("configuration_error", "token generation failed", 500),
    MissingCredential: ("missing_token", "authorization header is required", 401),
    MalformedCredential: (
        "invalid_token_format",
        "authorization header must be in format 'Bearer <token>'",
        401,
    ),
    TokenError: ("invalid_token", "invalid or expired token", 401),
    ProviderNotConfigured: (
        "oidc_not_configured",
        "OIDC provider not configured",
        400,
    ),
    MissingAuthorizationCode: ("missing_code", "authorization code is required", 400),
    TokenExchangeFailed: (
        "token_exchange_failed",
        "could not complete login with the identity provider",
        500,
    ),
    IdentityAssertionInvalid: ("invalid_id_token", "identity token is invalid", 401),
}

_INTERNAL_ERROR = ("internal_error", "internal server error", 500)


def translate_error(exc: CustomerOrdersError) -> tuple[str, str, int]:
    """Return ``(error, message, code)`` for an application error."""
    for klass in type(exc).__mro__:
        if klass in _ERROR_TABLE:
            return _ERROR_TABLE[klass]
    return _INTERNAL_ERROR


def error_response(
    error: str, message: str, code: int, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Render the public error body."""
    body = ErrorResponse(error=error, message=message, code=code)
    return JSONResponse(status_code=code, content=body.model_dump(), headers=headers)


async def handle_application_error(
    request: Request, exc: CustomerOrdersError
) -> JSONResponse:
    """Map an application error onto its public response."""
    error, message, code = translate_error(exc)
    if code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "Request failed: %s",
            type(exc).__name__,
            exc_info=exc,
            extra={"path": request.url.path, "error": error},
        )
    else:
        logger.info(
            "Request rejected: %s: %s",
            type(exc).__name__,
            exc,
            extra={"path": request.url.path, "error": error},
        )
    headers = None
    if isinstance(exc, CredentialError | TokenError):
        headers = {"WWW-Authenticate": "Bearer"}
    return error_response(error, message, code, headers=headers)


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report unparseable request input as an invalid request."""
    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "errors": exc.errors()},
    )
    error, message, code = _ERROR_TABLE[InvalidRequest]
    return error_response(error, message, code)


async def handle_http_error(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework HTTP errors (unknown route, wrong method) uniformly."""
    error = str(exc.detail).lower().replace(" ", "_")
    return error_response(error, str(exc.detail), exc.status_code, headers=exc.headers)


def register_error_handlers(app: FastAPI) -> None:
    """Install the error handlers on an application."""
    app.add_exception_handler(CustomerOrdersError, handle_application_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
