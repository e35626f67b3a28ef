"""ASGI entrypoint for the customer order API."""

from customer_orders.api.app import create_app
from customer_orders.containers import build_container

app = create_app(build_container())
