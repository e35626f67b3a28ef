"""Tests for HTTP-based adapters."""

import asyncio
import time
from urllib.parse import parse_qs

import httpx
import pytest
from jose import jwt

from customer_orders.adapters.oidc_client import HttpxOidcProvider, ProviderMetadata
from customer_orders.adapters.sms_client import HttpxSmsClient, format_phone_number
from customer_orders.errors import IdentityAssertionInvalid, TokenExchangeFailed

SMS_URL = "https://api.sandbox.africastalking.com/version1/messaging"
CLIENT_SECRET = "provider-client-secret"
METADATA = ProviderMetadata(
    issuer="https://idp.example.com",
    authorization_endpoint="https://idp.example.com/authorize",
    token_endpoint="https://idp.example.com/token",
    jwks_uri="https://idp.example.com/jwks",
)


def _sms_client(handler, sender_id: str | None = None) -> HttpxSmsClient:  # type: ignore[no-untyped-def]
    return HttpxSmsClient(
        username="sandbox",
        api_key="at-key",
        sender_id=sender_id,
        base_url=SMS_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def _accepted(status_code: int = 101) -> dict[str, object]:
    return {
        "SMSMessageData": {
            "Message": "Sent to 1/1 Total Cost: KES 0.8000",
            "Recipients": [
                {
                    "statusCode": status_code,
                    "number": "+254700000000",
                    "status": "Success" if status_code == 101 else "Queued",
                    "cost": "KES 0.8000",
                    "messageId": "ATXid_1",
                }
            ],
        }
    }


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("0700000000", "+254700000000"),
        ("700000000", "+254700000000"),
        ("+254 700-000 (000)", "+254700000000"),
        ("+15551234567", "+15551234567"),
    ],
)
def test_format_phone_number(raw: str, expected: str) -> None:
    assert format_phone_number(raw) == expected


def test_sms_client_posts_form_and_parses_success() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["form"] = parse_qs(request.content.decode())
        seen["apikey"] = request.headers["apikey"]
        return httpx.Response(201, json=_accepted())

    client = _sms_client(handler, sender_id="SHOP")

    result = asyncio.run(client.send("0700000000", "Hi Jane"))

    assert result.success
    assert result.message_id == "ATXid_1"
    assert seen["apikey"] == "at-key"
    assert seen["form"] == {
        "username": ["sandbox"],
        "to": ["+254700000000"],
        "message": ["Hi Jane"],
        "from": ["SHOP"],
    }


def test_sms_client_treats_queued_as_success() -> None:
    client = _sms_client(lambda request: httpx.Response(201, json=_accepted(102)))

    assert asyncio.run(client.send("+254700000000", "Hi")).success


def test_sms_client_reports_rejected_recipient() -> None:
    payload = _accepted()
    payload["SMSMessageData"]["Recipients"][0].update(  # type: ignore[index]
        statusCode=403, status="InvalidPhoneNumber"
    )
    client = _sms_client(lambda request: httpx.Response(201, json=payload))

    result = asyncio.run(client.send("123", "Hi"))

    assert not result.success
    assert result.detail == "InvalidPhoneNumber (code: 403)"


def test_sms_client_reports_http_failure() -> None:
    client = _sms_client(lambda request: httpx.Response(401, text="bad key"))

    result = asyncio.run(client.send("0700000000", "Hi"))

    assert not result.success
    assert result.detail is not None
    assert "HTTPStatusError" in result.detail


def test_sms_client_reports_empty_recipients() -> None:
    client = _sms_client(
        lambda request: httpx.Response(
            201, json={"SMSMessageData": {"Message": "InvalidSenderId", "Recipients": []}}
        )
    )

    result = asyncio.run(client.send("0700000000", "Hi"))

    assert not result.success


def _id_token(**overrides) -> str:  # type: ignore[no-untyped-def]
    now = int(time.time())
    claims = {
        "iss": METADATA.issuer,
        "aud": "client-id",
        "sub": "oidc|42",
        "email": "jane@example.com",
        "name": "Jane Doe",
        "iat": now,
        "exp": now + 300,
        **overrides,
    }
    return jwt.encode(claims, CLIENT_SECRET, algorithm="HS256")


def _provider(handler) -> HttpxOidcProvider:  # type: ignore[no-untyped-def]
    return HttpxOidcProvider(
        metadata=METADATA,
        client_id="client-id",
        client_secret=CLIENT_SECRET,
        redirect_uri="https://api.example.com/auth/callback",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_metadata_requires_endpoints() -> None:
    with pytest.raises(ValueError):
        ProviderMetadata.from_document({"issuer": "https://idp.example.com"})


def test_authorization_url_carries_code_flow_params() -> None:
    provider = _provider(lambda request: httpx.Response(500))

    url = httpx.URL(provider.build_authorization_url("state-123"))

    assert url.host == "idp.example.com"
    assert url.params["response_type"] == "code"
    assert url.params["client_id"] == "client-id"
    assert url.params["state"] == "state-123"
    assert url.params["scope"] == "openid profile email"
    assert url.params["redirect_uri"] == "https://api.example.com/auth/callback"


def test_exchange_code_returns_verified_identity() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["form"] = parse_qs(request.content.decode())
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(
            200, json={"id_token": _id_token(), "token_type": "Bearer"}
        )

    provider = _provider(handler)

    identity = asyncio.run(provider.exchange_code_for_identity("good-code"))

    assert identity.subject == "oidc|42"
    assert identity.email == "jane@example.com"
    assert identity.name == "Jane Doe"
    assert seen["form"]["code"] == ["good-code"]  # type: ignore[index]
    assert seen["form"]["grant_type"] == ["authorization_code"]  # type: ignore[index]
    assert str(seen["auth"]).startswith("Basic ")


def test_exchange_code_falls_back_to_username() -> None:
    token = _id_token(name=None, preferred_username="jdoe")
    provider = _provider(lambda request: httpx.Response(200, json={"id_token": token}))

    identity = asyncio.run(provider.exchange_code_for_identity("code"))

    assert identity.name == "jdoe"


def test_exchange_code_failure_is_token_exchange_failed() -> None:
    provider = _provider(
        lambda request: httpx.Response(400, json={"error": "invalid_grant"})
    )

    with pytest.raises(TokenExchangeFailed):
        asyncio.run(provider.exchange_code_for_identity("stale"))


def test_exchange_without_id_token_is_token_exchange_failed() -> None:
    provider = _provider(
        lambda request: httpx.Response(200, json={"access_token": "opaque"})
    )

    with pytest.raises(TokenExchangeFailed):
        asyncio.run(provider.exchange_code_for_identity("code"))


@pytest.mark.parametrize(
    "token",
    [
        _id_token(aud="someone-else"),
        _id_token(iss="https://evil.example.com"),
        _id_token(exp=int(time.time()) - 60),
        jwt.encode({"sub": "x"}, "wrong-secret", algorithm="HS256"),
        "not-a-jwt",
    ],
)
def test_exchange_rejects_bad_id_tokens(token: str) -> None:
    provider = _provider(lambda request: httpx.Response(200, json={"id_token": token}))

    with pytest.raises(IdentityAssertionInvalid):
        asyncio.run(provider.exchange_code_for_identity("code"))


def test_close_closes_sessions() -> None:
    provider = _provider(lambda request: httpx.Response(200))
    sms_client = _sms_client(lambda request: httpx.Response(200))

    asyncio.run(provider.close())
    asyncio.run(sms_client.close())

    assert provider.http_client.is_closed
    assert sms_client.http_client.is_closed
