"""Login, provider callback and session endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from customer_orders.api.schemas import (
    CallbackResponse,
    LoginRequest,
    RefreshRequest,
    TokenResponse,
    UserInfoResponse,
)
from customer_orders.api.security import require_session
from customer_orders.domain.auth import SessionClaims  # noqa: TC001

if TYPE_CHECKING:
    from customer_orders.containers import AppContainer

router = APIRouter(prefix="/auth", tags=["auth"])


@router.api_route("/login", methods=["GET", "POST"], response_model=None)
async def login(
    request: Request, payload: LoginRequest | None = None
) -> TokenResponse | RedirectResponse:
    """Log in directly, or redirect to the identity provider."""
    container: AppContainer = request.app.state.container
    result = await container.login_policy.login(
        email=payload.email if payload else None,
        password=payload.password if payload else None,
    )
    if result.envelope is None:
        return RedirectResponse(
            str(result.redirect_url), status_code=status.HTTP_302_FOUND
        )
    return TokenResponse.from_envelope(result.envelope)


@router.api_route("/callback", methods=["GET", "POST"])
async def callback(
    request: Request, code: str | None = None, state: str | None = None
) -> CallbackResponse:
    """Finish an identity provider login."""
    container: AppContainer = request.app.state.container
    envelope = await container.login_policy.complete_login(code=code, state=state)
    return CallbackResponse(auth=TokenResponse.from_envelope(envelope), state=state)


@router.post("/refresh")
async def refresh(payload: RefreshRequest, request: Request) -> TokenResponse:
    """Trade a refresh token for a new token pair."""
    container: AppContainer = request.app.state.container
    envelope = container.session_issuer.refresh(payload.refresh_token)
    return TokenResponse.from_envelope(envelope)


@router.get("/userinfo")
async def userinfo(claims: SessionClaims = Depends(require_session)) -> UserInfoResponse:
    """Return the claims of the calling session."""
    return UserInfoResponse.from_claims(claims)
