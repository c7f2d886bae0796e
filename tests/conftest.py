"""
Pytest configuration and fixtures.
"""
import threading
from typing import List, Tuple

import pytest

from order_service.clients import InventoryClient
from order_service.models import Customer, Product
from order_service.repository import CustomerRepository, OrderRepository, ProductRepository
from order_service.workflow import OrderOrchestrator


class RecordingNotificationSink:
    """Notification sink that keeps every message for assertions."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []
        self._lock = threading.Lock()

    def notify(self, customer_id: str, message: str) -> None:
        with self._lock:
            self.messages.append((customer_id, message))


class FailingNotificationSink:

    def notify(self, customer_id: str, message: str) -> None:
        raise ConnectionError("mail server unreachable")


class FailingPaymentClient:

    def __init__(self):
        self.calls = 0

    def process_payment(self, customer_id, amount, method):
        self.calls += 1
        raise RuntimeError("card processor unavailable")



class FailingShippingClient:

    def __init__(self):
        self.calls = 0

    def ship(self, order, address):
        self.calls += 1
        raise ConnectionError("carrier unreachable")

@pytest.fixture
def customers() -> CustomerRepository:
    return CustomerRepository([
        Customer(id="cust1", name="John Doe", email="john@example.com"),
    ])


@pytest.fixture
def products() -> ProductRepository:
    return ProductRepository([
        Product(id="prod1", name="Laptop", category="Electronics", price=999.99, stock_level=10),
        Product(id="prod2", name="Headphones", category="Electronics", price=149.99, stock_level=20),
        Product(id="prod3", name="T-shirt", category="Clothing", price=24.99, stock_level=2),
    ])


@pytest.fixture
def orders() -> OrderRepository:
    return OrderRepository()


@pytest.fixture
def notifications() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def inventory(products) -> InventoryClient:
    return InventoryClient(products)


@pytest.fixture
def orchestrator(customers, products, orders, inventory, notifications) -> OrderOrchestrator:
    """Orchestrator over seeded in-memory repositories with a recording notification sink."""
    return OrderOrchestrator(
        customers, products, orders,
        inventory=inventory,
        notifications=notifications,
        max_workers=4,
    )
