"""Bearer-token guard for protected routes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Header, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response  # noqa: TC002
from starlette.types import ASGIApp  # noqa: TC002

from customer_orders.api.errors import handle_application_error
from customer_orders.domain.auth import SessionClaims  # noqa: TC001
from customer_orders.errors import (
    CustomerOrdersError,
    MalformedCredential,
    MissingCredential,
)

if TYPE_CHECKING:
    from customer_orders.containers import AppContainer

BEARER_SCHEME = "Bearer"
PROTECTED_PREFIX = "/api/v1"


def parse_bearer(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise MissingCredential("authorization header is missing")
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_SCHEME or not parts[1]:  # noqa: PLR2004
        raise MalformedCredential("authorization header is not a bearer token")
    return parts[1]


def authenticate(request: Request, authorization: str | None) -> SessionClaims:
    """Verify the bearer token and attach its claims to the request."""
    container: AppContainer = request.app.state.container
    claims = container.token_codec.verify(parse_bearer(authorization))
    request.state.claims = claims
    return claims


async def require_session(
    request: Request,
    authorization: str | None = Header(default=None),
) -> SessionClaims:
    """Route dependency for protected endpoints outside the guarded prefix."""
    return authenticate(request, authorization)


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """Reject requests under ``prefix`` without a valid session token.

    Runs before routing, so the request body is never read for an
    unauthenticated caller.
    """

    def __init__(self, app: ASGIApp, prefix: str = PROTECTED_PREFIX) -> None:
        super().__init__(app)
        self.prefix = prefix

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path != self.prefix and not path.startswith(f"{self.prefix}/"):
            return await call_next(request)
        try:
            authenticate(request, request.headers.get("Authorization"))
        except CustomerOrdersError as exc:
            return await handle_application_error(request, exc)
        return await call_next(request)
