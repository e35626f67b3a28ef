"""Pydantic request and response models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt

from customer_orders.domain.auth import SessionClaims, TokenEnvelope
from customer_orders.domain.models import CustomerRecord, OrderRecord, Page


class ErrorResponse(BaseModel):
    error: str
    message: str
    code: int


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"

    @classmethod
    def from_envelope(cls, envelope: TokenEnvelope) -> "TokenResponse":
        return cls(
            access_token=envelope.access_token,
            refresh_token=envelope.refresh_token,
            expires_in=envelope.expires_in,
            token_type=envelope.token_type,
        )


class CallbackResponse(BaseModel):
    auth: TokenResponse
    state: str | None = None


class UserInfoResponse(BaseModel):
    sub: str
    email: str
    name: str
    iss: str
    aud: str
    exp: int
    iat: int

    @classmethod
    def from_claims(cls, claims: SessionClaims) -> "UserInfoResponse":
        return cls(
            sub=claims.subject,
            email=claims.email,
            name=claims.name,
            iss=claims.issuer,
            aud=claims.audience,
            exp=int(claims.expires_at.timestamp()),
            iat=int(claims.issued_at.timestamp()),
        )


class CreateCustomerRequest(BaseModel):
    name: str
    code: str
    phone: str
    email: str | None = None


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    phone: str
    email: str | None = None
    created_at: datetime | None = None


class CreateOrderRequest(BaseModel):
    """Order input; field rules are enforced by the order service."""

    item: str | None = None
    amount: StrictFloat | None = None
    time: datetime | None = None
    customer_id: StrictInt | None = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item: str
    amount: float
    time: datetime
    customer_id: int
    customer: CustomerResponse | None = None
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, order: OrderRecord) -> "OrderResponse":
        return cls.model_validate(order, from_attributes=True)


class CustomerPage(BaseModel):
    customers: list[CustomerResponse]
    total: int
    page: int
    limit: int

    @classmethod
    def from_page(cls, page: Page[CustomerRecord]) -> "CustomerPage":
        return cls(
            customers=[
                CustomerResponse.model_validate(item, from_attributes=True)
                for item in page.items
            ],
            total=page.total,
            page=page.page,
            limit=page.limit,
        )


class OrderPage(BaseModel):
    orders: list[OrderResponse]
    total: int
    page: int
    limit: int

    @classmethod
    def from_page(cls, page: Page[OrderRecord]) -> "OrderPage":
        return cls(
            orders=[OrderResponse.from_record(item) for item in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
        )
