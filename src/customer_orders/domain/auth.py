"""Domain models for authentication."""

from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta

ISSUER = "customer-order-api"
AUDIENCE = "customer-order-api"
ACCESS_TOKEN_TTL = timedelta(hours=24)
REFRESH_TOKEN_TTL = timedelta(days=7)
ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class SessionClaims:
    """Identity facts carried inside a session token."""

    subject: str
    email: str
    name: str
    issued_at: datetime
    expires_at: datetime
    issuer: str = ISSUER
    audience: str = AUDIENCE
    not_before: datetime | None = None
    token_type: str = ACCESS

    def __post_init__(self) -> None:
        if self.expires_at <= self.issued_at:
            raise ValueError("expires_at must be later than issued_at")

    @classmethod
    def new(  # noqa: PLR0913
        cls,
        subject: str,
        email: str,
        name: str,
        now: datetime,
        ttl: timedelta = ACCESS_TOKEN_TTL,
        token_type: str = ACCESS,
    ) -> "SessionClaims":
        """Create claims valid from ``now`` for ``ttl``, at second precision."""
        issued_at = now.astimezone(UTC).replace(microsecond=0)
        return cls(
            subject=subject,
            email=email,
            name=name,
            issued_at=issued_at,
            expires_at=issued_at + ttl,
            token_type=token_type,
        )

    def as_refresh(self) -> "SessionClaims":
        """Return a refresh-token variant of these claims."""
        return replace(
            self,
            expires_at=self.issued_at + REFRESH_TOKEN_TTL,
            token_type=REFRESH,
        )

    def to_payload(self) -> dict[str, object]:
        """Return the JWT payload for these claims."""
        payload: dict[str, object] = {
            "sub": self.subject,
            "email": self.email,
            "name": self.name,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
            "typ": self.token_type,
        }
        if self.not_before is not None:
            payload["nbf"] = int(self.not_before.timestamp())
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "SessionClaims":
        """Build claims from a decoded JWT payload.

        Raises KeyError, TypeError or ValueError when fields are missing or
        have the wrong shape.
        """
        nbf = payload.get("nbf")
        return cls(
            subject=_require_str(payload, "sub"),
            email=_require_str(payload, "email"),
            name=_require_str(payload, "name"),
            issuer=_require_str(payload, "iss"),
            audience=_require_str(payload, "aud"),
            issued_at=_timestamp(payload["iat"]),
            expires_at=_timestamp(payload["exp"]),
            not_before=_timestamp(nbf) if nbf is not None else None,
            token_type=_require_str(payload, "typ"),
        )


@dataclass(frozen=True)
class TokenEnvelope:
    """Tokens handed to a client after login."""

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


@dataclass(frozen=True)
class VerifiedIdentity:
    """Identity extracted from a verified provider ID token."""

    subject: str
    email: str
    name: str


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a login attempt: tokens, or a redirect to the provider."""

    envelope: TokenEnvelope | None = None
    redirect_url: str | None = None


def _require_str(payload: dict[str, object], key: str) -> str:
    value = payload[key]
    if not isinstance(value, str):
        raise TypeError(f"claim {key!r} must be a string")
    return value


def _timestamp(value: object) -> datetime:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError("timestamp claims must be numeric")
    return datetime.fromtimestamp(value, tz=UTC)
