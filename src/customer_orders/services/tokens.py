"""Signed session tokens.

Tokens are HS256 JWTs signed with the process-wide secret from settings.
There is no fallback secret: a codec built without one refuses to issue or
verify anything.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from jose import jwt
from jose.exceptions import JWTClaimsError, JWTError

from customer_orders.domain.auth import ACCESS, AUDIENCE, ISSUER, SessionClaims
from customer_orders.errors import (
    ConfigurationError,
    InvalidTokenClaims,
    MalformedToken,
    SignatureMismatch,
    TokenExpired,
    TokenNotYetValid,
)


def utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(tz=UTC)


@dataclass
class TokenCodec:
    """Issue and verify signed session tokens."""

    secret: str | None
    algorithm: str = "HS256"
    clock: Callable[[], datetime] = field(default=utcnow)

    def issue(self, claims: SessionClaims) -> str:
        """Encode and sign claims."""
        return jwt.encode(
            claims.to_payload(), self._require_secret(), algorithm=self.algorithm
        )

    def verify(self, token: str, expected_type: str = ACCESS) -> SessionClaims:
        """Decode a token, check its signature, lifetime and type."""
        secret = self._require_secret()
        try:
            header = jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise MalformedToken(str(exc)) from exc
        if header.get("alg") != self.algorithm:
            raise SignatureMismatch(f"unexpected signing algorithm {header.get('alg')}")

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                audience=AUDIENCE,
                issuer=ISSUER,
                options={"verify_exp": False, "verify_nbf": False, "verify_iat": False},
            )
        except JWTClaimsError as exc:
            raise InvalidTokenClaims(str(exc)) from exc
        except JWTError as exc:
            raise SignatureMismatch(str(exc)) from exc

        try:
            claims = SessionClaims.from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedToken(f"invalid claims: {exc}") from exc

        now = self.clock()
        if now >= claims.expires_at:
            raise TokenExpired("token has expired")
        if claims.not_before is not None and now < claims.not_before:
            raise TokenNotYetValid("token is not valid yet")
        if claims.token_type != expected_type:
            raise InvalidTokenClaims(
                f"expected a {expected_type} token, got {claims.token_type}"
            )
        return claims

    def _require_secret(self) -> str:
        if not self.secret:
            raise ConfigurationError("JWT signing secret is not configured")
        return self.secret
