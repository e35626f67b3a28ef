"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from customer_orders.api.auth import router as auth_router
from customer_orders.api.customers import router as customers_router
from customer_orders.api.errors import register_error_handlers
from customer_orders.api.orders import router as orders_router
from customer_orders.api.security import PROTECTED_PREFIX, BearerAuthMiddleware
from customer_orders.app_logging import configure_logging
from customer_orders.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Starting customer order API",
            extra={"environment": container.settings.environment},
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Customer Order API", lifespan=lifespan)
    app.state.container = container
    register_error_handlers(app)
    app.add_middleware(BearerAuthMiddleware, prefix=PROTECTED_PREFIX)

    protected = APIRouter(prefix=PROTECTED_PREFIX)
    protected.include_router(customers_router)
    protected.include_router(orders_router)

    app.include_router(auth_router)
    app.include_router(protected)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
