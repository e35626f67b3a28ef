"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

import pytest

from customer_orders.adapters.sms_client import SmsClient
from customer_orders.config import Settings
from customer_orders.containers import AppContainer
from customer_orders.domain.auth import VerifiedIdentity
from customer_orders.domain.models import CustomerRecord, OrderRecord
from customer_orders.domain.notifications import SmsDeliveryResult
from customer_orders.errors import TokenExchangeFailed
from customer_orders.services.background import BackgroundDispatcher
from customer_orders.services.customers import CustomerRepository, CustomerService
from customer_orders.services.identity import (
    DirectCredentialPolicy,
    IdentityProvider,
    SessionIssuer,
)
from customer_orders.services.notifications import OrderNotifier
from customer_orders.services.orders import OrderRepository, OrderService
from customer_orders.services.tokens import TokenCodec

FIXED_NOW = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)
JWT_SECRET = "test-secret"


@dataclass
class InMemoryCustomerRepository(CustomerRepository):
    """In-memory customer repository for tests."""

    customers: dict[int, CustomerRecord] = field(default_factory=dict)
    fail: bool = False
    lookups: list[int] = field(default_factory=list)

    def add(
        self, customer_id: int, name: str, phone: str, code: str | None = None
    ) -> CustomerRecord:
        customer = CustomerRecord(
            id=customer_id,
            name=name,
            code=code or f"C{customer_id:03d}",
            phone=phone,
        )
        self.customers[customer_id] = customer
        return customer

    def get_customer(self, customer_id: int) -> CustomerRecord | None:
        self.lookups.append(customer_id)
        if self.fail:
            raise RuntimeError("database unavailable")
        return self.customers.get(customer_id)

    def get_by_code(self, code: str) -> CustomerRecord | None:
        if self.fail:
            raise RuntimeError("database unavailable")
        for customer in self.customers.values():
            if customer.code == code:
                return customer
        return None

    def create_customer(
        self, name: str, code: str, phone: str, email: str | None
    ) -> CustomerRecord:
        customer_id = max(self.customers, default=0) + 1
        customer = CustomerRecord(
            id=customer_id,
            name=name,
            code=code,
            phone=phone,
            email=email,
            created_at=FIXED_NOW,
        )
        self.customers[customer_id] = customer
        return customer

    def list_customers(
        self, offset: int, limit: int
    ) -> tuple[list[CustomerRecord], int]:
        if self.fail:
            raise RuntimeError("database unavailable")
        ordered = [self.customers[key] for key in sorted(self.customers)]
        return ordered[offset : offset + limit], len(ordered)


@dataclass
class InMemoryOrderRepository(OrderRepository):
    """In-memory order repository that embeds customers on read."""

    customer_repository: InMemoryCustomerRepository
    orders: dict[int, OrderRecord] = field(default_factory=dict)
    fail_on_create: bool = False
    create_calls: int = 0

    def create_order(
        self, item: str, amount: float, time: datetime, customer_id: int
    ) -> OrderRecord:
        self.create_calls += 1
        if self.fail_on_create:
            raise RuntimeError("insert failed")
        order_id = max(self.orders, default=0) + 1
        order = OrderRecord(
            id=order_id,
            item=item,
            amount=amount,
            time=time,
            customer_id=customer_id,
            created_at=FIXED_NOW,
        )
        self.orders[order_id] = order
        return order

    def get_order(self, order_id: int) -> OrderRecord | None:
        order = self.orders.get(order_id)
        if order is None:
            return None
        return self._embed(order)

    def list_orders(
        self, offset: int, limit: int, customer_id: int | None
    ) -> tuple[list[OrderRecord], int]:
        ordered = [
            self._embed(self.orders[key])
            for key in sorted(self.orders)
            if customer_id is None or self.orders[key].customer_id == customer_id
        ]
        return ordered[offset : offset + limit], len(ordered)

    def _embed(self, order: OrderRecord) -> OrderRecord:
        customer = self.customer_repository.customers.get(order.customer_id)
        return replace(order, customer=customer)


@dataclass
class FakeSmsClient(SmsClient):
    """Fake SMS client that records messages."""

    messages: list[tuple[str, str]] = field(default_factory=list)
    result: SmsDeliveryResult = field(
        default_factory=lambda: SmsDeliveryResult(success=True, message_id="ATXid_1")
    )
    closed: bool = False

    async def send(self, to: str, text: str) -> SmsDeliveryResult:
        self.messages.append((to, text))
        return self.result

    async def close(self) -> None:
        self.closed = True


@dataclass
class FailingSmsClient(SmsClient):
    """SMS client whose gateway is always down."""

    attempts: int = 0

    async def send(self, to: str, text: str) -> SmsDeliveryResult:
        self.attempts += 1
        raise ConnectionError("gateway unreachable")

    async def close(self) -> None:
        return None


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Identity provider that accepts a single authorization code."""

    valid_code: str = "good-code"
    identity: VerifiedIdentity = field(
        default_factory=lambda: VerifiedIdentity(
            subject="oidc|42", email="jane@example.com", name="Jane Doe"
        )
    )
    states: list[str] = field(default_factory=list)
    codes: list[str] = field(default_factory=list)

    def build_authorization_url(self, state: str) -> str:
        self.states.append(state)
        return f"https://idp.example.com/authorize?state={state}"

    async def exchange_code_for_identity(self, code: str) -> VerifiedIdentity:
        self.codes.append(code)
        if code != self.valid_code:
            raise TokenExchangeFailed("invalid_grant")
        return self.identity


def fixed_clock() -> datetime:
    return FIXED_NOW


def bearer(container: AppContainer, email: str = "ops@example.com") -> dict[str, str]:
    """Return an Authorization header for a freshly issued access token."""
    envelope = container.session_issuer.issue_envelope(
        subject=email, email=email, name=email.split("@")[0]
    )
    return {"Authorization": f"Bearer {envelope.access_token}"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret=JWT_SECRET,
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        africastalking_username="sandbox",
        africastalking_api_key="at-key",
        oidc_provider_url=None,
        oidc_client_id=None,
        oidc_client_secret=None,
        oidc_redirect_uri=None,
    )


@pytest.fixture
def token_codec() -> TokenCodec:
    return TokenCodec(secret=JWT_SECRET, clock=fixed_clock)


@pytest.fixture
def customer_repository() -> InMemoryCustomerRepository:
    repository = InMemoryCustomerRepository()
    repository.add(7, name="Jane", phone="+254700000000")
    return repository


@pytest.fixture
def order_repository(
    customer_repository: InMemoryCustomerRepository,
) -> InMemoryOrderRepository:
    return InMemoryOrderRepository(customer_repository)


@pytest.fixture
def sms_client() -> FakeSmsClient:
    return FakeSmsClient()


def make_container(
    settings: Settings,
    token_codec: TokenCodec,
    customer_repository: InMemoryCustomerRepository,
    order_repository: InMemoryOrderRepository,
    sms_client: SmsClient,
) -> AppContainer:
    """Wire a container from in-memory fakes."""
    session_issuer = SessionIssuer(token_codec)
    dispatcher = BackgroundDispatcher()
    order_service = OrderService(
        customer_repository=customer_repository,
        order_repository=order_repository,
        notifier=OrderNotifier(sms_client),
        dispatcher=dispatcher,
        clock=fixed_clock,
    )

    async def close_resources() -> None:
        await dispatcher.drain()

    return AppContainer(
        settings=settings,
        token_codec=token_codec,
        session_issuer=session_issuer,
        login_policy=DirectCredentialPolicy(session_issuer),
        sms_client=sms_client,
        dispatcher=dispatcher,
        customer_service=CustomerService(customer_repository),
        order_service=order_service,
        close_resources=close_resources,
    )


@pytest.fixture
def container(
    settings: Settings,
    token_codec: TokenCodec,
    customer_repository: InMemoryCustomerRepository,
    order_repository: InMemoryOrderRepository,
    sms_client: FakeSmsClient,
) -> AppContainer:
    return make_container(
        settings, token_codec, customer_repository, order_repository, sms_client
    )
