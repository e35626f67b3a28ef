"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx
from supabase import create_client

from customer_orders.adapters.oidc_client import HttpxOidcProvider
from customer_orders.adapters.sms_client import HttpxSmsClient, SmsClient
from customer_orders.adapters.supabase_customer_repository import (
    SupabaseCustomerRepository,
)
from customer_orders.adapters.supabase_order_repository import SupabaseOrderRepository
from customer_orders.config import Settings
from customer_orders.services.background import BackgroundDispatcher
from customer_orders.services.customers import CustomerService
from customer_orders.services.identity import (
    LoginPolicy,
    SessionIssuer,
    build_login_policy,
)
from customer_orders.services.notifications import OrderNotifier
from customer_orders.services.orders import OrderService
from customer_orders.services.tokens import TokenCodec

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    token_codec: TokenCodec
    session_issuer: SessionIssuer
    login_policy: LoginPolicy
    sms_client: SmsClient
    dispatcher: BackgroundDispatcher
    customer_service: CustomerService
    order_service: OrderService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    if not resolved_settings.jwt_secret:
        logger.warning("JWT_SECRET is not set; token issuance will fail")
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    customer_repository = SupabaseCustomerRepository(supabase_client)
    order_repository = SupabaseOrderRepository(supabase_client)
    token_codec = TokenCodec(secret=resolved_settings.jwt_secret)
    session_issuer = SessionIssuer(token_codec)
    identity_provider = discover_identity_provider(resolved_settings)
    login_policy = build_login_policy(session_issuer, identity_provider)
    sms_client = HttpxSmsClient.create(
        username=resolved_settings.africastalking_username,
        api_key=resolved_settings.africastalking_api_key,
        sender_id=resolved_settings.africastalking_sender_id,
        base_url=resolved_settings.sms_base_url,
    )
    dispatcher = BackgroundDispatcher()
    customer_service = CustomerService(customer_repository)
    order_service = OrderService(
        customer_repository=customer_repository,
        order_repository=order_repository,
        notifier=OrderNotifier(sms_client),
        dispatcher=dispatcher,
    )

    async def close_resources() -> None:
        await dispatcher.drain()
        await sms_client.close()
        if identity_provider is not None:
            await identity_provider.close()

    return AppContainer(
        settings=resolved_settings,
        token_codec=token_codec,
        session_issuer=session_issuer,
        login_policy=login_policy,
        sms_client=sms_client,
        dispatcher=dispatcher,
        customer_service=customer_service,
        order_service=order_service,
        close_resources=close_resources,
    )


def discover_identity_provider(settings: Settings) -> HttpxOidcProvider | None:
    """Return a provider client when OIDC is configured and reachable."""
    if not settings.oidc_configured:
        return None
    try:
        return HttpxOidcProvider.discover(
            provider_url=str(settings.oidc_provider_url),
            client_id=str(settings.oidc_client_id),
            client_secret=str(settings.oidc_client_secret),
            redirect_uri=str(settings.oidc_redirect_uri),
        )
    except (httpx.HTTPError, ValueError):
        logger.exception(
            "OIDC discovery failed; falling back to direct login",
            extra={"provider_url": settings.oidc_provider_url},
        )
        return None
