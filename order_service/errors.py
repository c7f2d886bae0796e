"""
errors.py — Domain Exceptions for Order Processing

All exceptions raised by the order workflow derive from `OrderWorkflowError`.
They describe validation failures (missing entities, wrong order state,
insufficient stock) and are raised to the immediate caller. None of them is
retried by the workflow.
"""

from typing import Iterable


class OrderWorkflowError(Exception):
    """Base class for every domain failure of the order workflow."""


class CustomerNotFound(OrderWorkflowError):
    """The customer referenced by an order does not exist."""

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer not found: {customer_id}")


class ProductNotFound(OrderWorkflowError):
    """One or more requested products do not exist."""

    def __init__(self, product_ids: Iterable[str]):
        self.product_ids = list(product_ids)
        super().__init__(f"Products not found: {', '.join(self.product_ids)}")


class InsufficientStock(OrderWorkflowError):
    """Not enough stock to satisfy the requested quantity of one or more products."""

    def __init__(self, product_ids: Iterable[str]):
        self.product_ids = list(product_ids)
        super().__init__(f"Insufficient stock for products: {', '.join(self.product_ids)}")


class InvalidQuantity(OrderWorkflowError):
    """One or more requested quantities are not positive."""

    def __init__(self, product_ids: Iterable[str]):
        self.product_ids = list(product_ids)
        super().__init__(f"Quantity must be positive for products: {', '.join(self.product_ids)}")


class OrderNotFound(OrderWorkflowError):
    """The requested order does not exist."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class InvalidState(OrderWorkflowError):
    """An operation was attempted on an order whose status does not allow it."""

    def __init__(self, order_id: str, expected, actual):
        self.order_id = order_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Order {order_id} is in state {_name(actual)}, expected {_name(expected)}"
        )


def _name(status) -> str:
    return getattr(status, "value", str(status))
