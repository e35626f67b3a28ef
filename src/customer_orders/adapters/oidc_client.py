"""OpenID Connect provider client."""

from dataclasses import dataclass, field

import httpx
from jose import jwt
from jose.exceptions import JWTError

from customer_orders.domain.auth import VerifiedIdentity
from customer_orders.errors import IdentityAssertionInvalid, TokenExchangeFailed
from customer_orders.services.identity import IdentityProvider

_HMAC_ALGORITHMS = {"HS256", "HS384", "HS512"}
_ASYMMETRIC_ALGORITHMS = {"RS256", "RS384", "RS512", "ES256", "ES384", "ES512"}
DEFAULT_SCOPES = ("openid", "profile", "email")


@dataclass(frozen=True)
class ProviderMetadata:
    """Endpoints published in the provider discovery document."""

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    jwks_uri: str

    @classmethod
    def from_document(cls, document: dict[str, object]) -> "ProviderMetadata":
        """Build metadata from a parsed openid-configuration document."""
        try:
            return cls(
                issuer=str(document["issuer"]),
                authorization_endpoint=str(document["authorization_endpoint"]),
                token_endpoint=str(document["token_endpoint"]),
                jwks_uri=str(document["jwks_uri"]),
            )
        except KeyError as exc:
            raise ValueError(f"discovery document is missing {exc}") from exc


@dataclass
class HttpxOidcProvider(IdentityProvider):
    """Authorization-code flow against an OpenID Connect provider."""

    metadata: ProviderMetadata
    client_id: str
    client_secret: str
    redirect_uri: str
    http_client: httpx.AsyncClient
    scopes: tuple[str, ...] = DEFAULT_SCOPES
    _jwks: dict[str, object] | None = field(default=None, init=False, repr=False)

    @classmethod
    def discover(
        cls,
        provider_url: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
    ) -> "HttpxOidcProvider":
        """Fetch provider metadata and create a client with a managed session."""
        url = f"{provider_url.rstrip('/')}/.well-known/openid-configuration"
        response = httpx.get(url, timeout=10)
        response.raise_for_status()
        return cls(
            metadata=ProviderMetadata.from_document(response.json()),
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            http_client=httpx.AsyncClient(),
        )

    def build_authorization_url(self, state: str) -> str:
        """Return the authorization endpoint URL for a code-flow login."""
        url = httpx.URL(self.metadata.authorization_endpoint).copy_merge_params(
            {
                "client_id": self.client_id,
                "response_type": "code",
                "scope": " ".join(self.scopes),
                "redirect_uri": self.redirect_uri,
                "state": state,
                "access_type": "offline",
            }
        )
        return str(url)

    async def exchange_code_for_identity(self, code: str) -> VerifiedIdentity:
        """Redeem the code at the token endpoint and verify the ID token."""
        try:
            response = await self.http_client.post(
                self.metadata.token_endpoint,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.redirect_uri,
                },
                auth=(self.client_id, self.client_secret),
                headers={"Accept": "application/json"},
                timeout=10,
            )
            response.raise_for_status()
            tokens = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TokenExchangeFailed(str(exc)) from exc

        raw_id_token = tokens.get("id_token") if isinstance(tokens, dict) else None
        if not isinstance(raw_id_token, str) or not raw_id_token:
            raise TokenExchangeFailed("no id_token in token response")
        claims = await self._verify_id_token(raw_id_token, tokens.get("access_token"))

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise IdentityAssertionInvalid("ID token has no subject")
        email = str(claims.get("email") or "")
        name = str(claims.get("name") or claims.get("preferred_username") or email)
        return VerifiedIdentity(subject=subject, email=email, name=name)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _verify_id_token(
        self, raw_id_token: str, access_token: object
    ) -> dict[str, object]:
        try:
            header = jwt.get_unverified_header(raw_id_token)
        except JWTError as exc:
            raise IdentityAssertionInvalid(str(exc)) from exc

        algorithm = header.get("alg")
        if algorithm in _HMAC_ALGORITHMS:
            key: object = self.client_secret
        elif algorithm in _ASYMMETRIC_ALGORITHMS:
            key = await self._signing_key(header.get("kid"))
        else:
            raise IdentityAssertionInvalid(f"unsupported ID token algorithm {algorithm}")

        try:
            return jwt.decode(
                raw_id_token,
                key,
                algorithms=[algorithm],
                audience=self.client_id,
                issuer=self.metadata.issuer,
                access_token=access_token if isinstance(access_token, str) else None,
            )
        except JWTError as exc:
            raise IdentityAssertionInvalid(str(exc)) from exc

    async def _signing_key(self, kid: object) -> dict[str, object]:
        key = _select_key(await self._load_jwks(refresh=False), kid)
        if key is None:
            # Provider may have rotated keys since the last fetch.
            key = _select_key(await self._load_jwks(refresh=True), kid)
        if key is None:
            raise IdentityAssertionInvalid(f"no signing key matches kid {kid}")
        return key

    async def _load_jwks(self, refresh: bool) -> dict[str, object]:
        if self._jwks is not None and not refresh:
            return self._jwks
        try:
            response = await self.http_client.get(self.metadata.jwks_uri, timeout=10)
            response.raise_for_status()
            self._jwks = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise IdentityAssertionInvalid(f"could not load provider keys: {exc}") from exc
        return self._jwks


def _select_key(jwks: dict[str, object], kid: object) -> dict[str, object] | None:
    keys = jwks.get("keys")
    if not isinstance(keys, list):
        return None
    for key in keys:
        if isinstance(key, dict) and (kid is None or key.get("kid") == kid):
            return key
    return None
