"""Login policies that turn credentials or provider assertions into tokens."""

import logging
import secrets
from dataclasses import dataclass
from typing import Protocol

from customer_orders.domain.auth import (
    ACCESS_TOKEN_TTL,
    REFRESH,
    LoginResult,
    SessionClaims,
    TokenEnvelope,
    VerifiedIdentity,
)
from customer_orders.errors import (
    InvalidRequest,
    MissingAuthorizationCode,
    ProviderNotConfigured,
)
from customer_orders.services.tokens import TokenCodec

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Interface for an OpenID Connect identity provider."""

    def build_authorization_url(self, state: str) -> str:
        """Return the provider URL the end user should be redirected to."""

    async def exchange_code_for_identity(self, code: str) -> VerifiedIdentity:
        """Exchange an authorization code for a verified identity."""


class LoginPolicy(Protocol):
    """Strategy used by the login endpoints, chosen once at startup."""

    async def login(self, email: str | None, password: str | None) -> LoginResult:
        """Start or finish a login from the login endpoint."""

    async def complete_login(self, code: str | None, state: str | None) -> TokenEnvelope:
        """Finish a provider login from the callback endpoint."""


@dataclass
class SessionIssuer:
    """Mint token envelopes for an established identity."""

    codec: TokenCodec

    def issue_envelope(self, subject: str, email: str, name: str) -> TokenEnvelope:
        """Issue an access and a refresh token for the identity."""
        claims = SessionClaims.new(
            subject=subject, email=email, name=name, now=self.codec.clock()
        )
        return TokenEnvelope(
            access_token=self.codec.issue(claims),
            refresh_token=self.codec.issue(claims.as_refresh()),
            expires_in=int(ACCESS_TOKEN_TTL.total_seconds()),
        )

    def refresh(self, refresh_token: str) -> TokenEnvelope:
        """Exchange a valid refresh token for a new envelope."""
        claims = self.codec.verify(refresh_token, expected_type=REFRESH)
        return self.issue_envelope(claims.subject, claims.email, claims.name)


@dataclass
class DirectCredentialPolicy:
    """Accept any non-empty email and password.

    Credentials are not checked against a store; the email becomes the
    subject of the issued session.
    """

    issuer: SessionIssuer

    async def login(self, email: str | None, password: str | None) -> LoginResult:
        """Issue tokens for the presented email."""
        email = (email or "").strip()
        if not email or not password:
            raise InvalidRequest("email and password are required")
        name = email.split("@", maxsplit=1)[0]
        envelope = self.issuer.issue_envelope(subject=email, email=email, name=name)
        logger.info("Issued session via direct login", extra={"subject": email})
        return LoginResult(envelope=envelope)

    async def complete_login(self, code: str | None, state: str | None) -> TokenEnvelope:
        """Reject provider callbacks: no provider is configured."""
        raise ProviderNotConfigured("OIDC provider not configured")


@dataclass
class DelegatedLoginPolicy:
    """Redirect to an OpenID Connect provider and trust its ID token."""

    issuer: SessionIssuer
    provider: IdentityProvider

    def begin_login(self) -> str:
        """Return the authorization URL with a fresh state value."""
        state = secrets.token_urlsafe(24)
        return self.provider.build_authorization_url(state)

    async def login(self, email: str | None, password: str | None) -> LoginResult:
        """Ignore any credentials and redirect to the provider."""
        return LoginResult(redirect_url=self.begin_login())

    async def complete_login(self, code: str | None, state: str | None) -> TokenEnvelope:
        """Exchange the code, verify the assertion and issue tokens."""
        if not code:
            raise MissingAuthorizationCode("authorization code is required")
        identity = await self.provider.exchange_code_for_identity(code)
        envelope = self.issuer.issue_envelope(
            subject=identity.subject, email=identity.email, name=identity.name
        )
        logger.info(
            "Issued session via OIDC login", extra={"subject": identity.subject}
        )
        return envelope


def build_login_policy(
    issuer: SessionIssuer, provider: IdentityProvider | None
) -> LoginPolicy:
    """Select the login policy for this process."""
    if provider is None:
        return DirectCredentialPolicy(issuer)
    return DelegatedLoginPolicy(issuer=issuer, provider=provider)
