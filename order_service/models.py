"""
models.py — Data Models for Order Processing

This module defines the data structures used by the order workflow.
It uses Pydantic models to ensure type safety and validation of the data
that flows between the repositories, the collaborators and the orchestrator.

All models are frozen. A status change never mutates an order in place,
it produces a new `Order` value through `Order.transition()`.

Models:
    - Customer: A customer who can place orders.
    - Product: A sellable product with its current stock level.
    - OrderItem: A single line of an order with the price captured at creation.
    - PaymentRecord: Confirmation of a processed payment.
    - ShippingRecord: Confirmation that an order left the warehouse.
    - Order: The order aggregate and its status lifecycle.
    - PaymentOutcome: Per-order result of a batch payment run.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidState


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, Enum):
    """
    Lifecycle of an order. Transitions are strictly forward:
    CREATED → PAID → PREPARING → SHIPPED
    """
    CREATED = "CREATED"
    PAID = "PAID"
    PREPARING = "PREPARING"
    SHIPPED = "SHIPPED"

    @property
    def next_status(self) -> Optional["OrderStatus"]:
        return _TRANSITIONS.get(self)


_TRANSITIONS = {
    OrderStatus.CREATED: OrderStatus.PAID,
    OrderStatus.PAID: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.SHIPPED,
}


class Customer(BaseModel):
    """
    Represents a customer.

    Attributes:
        id (str): Unique customer identifier.
        name (str): Display name.
        email (str): Contact email address.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str


class Product(BaseModel):
    """
    Represents a product of the catalogue.

    Attributes:
        id (str): Unique product identifier.
        name (str): Product name.
        category (str): Product category, e.g. 'Electronics'.
        price (float): Current unit price.
        stock_level (int): Units in stock. Never negative.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str
    price: float = Field(..., ge=0)
    stock_level: int = Field(..., ge=0)

    def with_stock(self, stock_level: int) -> "Product":
        return self.model_copy(update={"stock_level": stock_level})


class OrderItem(BaseModel):
    """
    Represents a single product line in an order.

    Attributes:
        product_id (str): The ordered product.
        quantity (int): Units ordered. Must be greater than zero.
        price (float): Unit price snapshot taken when the order was created.
    """
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0)

    @property
    def total(self) -> float:
        return self.price * self.quantity


class PaymentRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_id: str
    method: str
    amount: float
    processed_at: datetime = Field(default_factory=utcnow)


class ShippingRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str
    address: str
    tracking_code: str
    shipped_at: datetime = Field(default_factory=utcnow)


class Order(BaseModel):
    """
    Represents an order and its position in the status lifecycle.

    Attributes:
        id (str): Unique order identifier.
        customer_id (str): The customer who placed the order.
        items (Tuple[OrderItem, ...]): Ordered lines. Fixed after creation.
        created_at (datetime): Creation timestamp (UTC).
        status (OrderStatus): Current lifecycle status.
        payment (Optional[PaymentRecord]): Set when the order becomes PAID.
        shipping (Optional[ShippingRecord]): Set when the order becomes SHIPPED.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    customer_id: str
    items: Tuple[OrderItem, ...]
    created_at: datetime = Field(default_factory=utcnow)
    status: OrderStatus = OrderStatus.CREATED
    payment: Optional[PaymentRecord] = None
    shipping: Optional[ShippingRecord] = None

    @property
    def total(self) -> float:
        """Sum of quantity × captured unit price over all items, in cents precision."""
        return round(sum(item.total for item in self.items), 2)

    def transition(self, new_status: OrderStatus, **updates) -> "Order":
        """
        Returns a copy of this order moved to `new_status`.

        Args:
            new_status (OrderStatus): Target status. Must be the direct successor
                of the current status.
            **updates: Additional fields to replace, e.g. `payment=...`.

        Raises:
            InvalidState: If `new_status` is not reachable in one step.
        """
        if self.status.next_status is not new_status:
            expected = next((s for s, n in _TRANSITIONS.items() if n is new_status), None)
            raise InvalidState(self.id, expected, self.status)
        return self.model_copy(update={"status": new_status, **updates})


class PaymentOutcome(BaseModel):
    """
    Result of processing the payment of one order inside a batch.

    Attributes:
        order_id (str): The order that was processed.
        success (bool): True if the order reached PAID.
        status (Optional[OrderStatus]): Status after processing, if the order exists.
        error (Optional[str]): Failure message when `success` is False.
    """
    order_id: str
    success: bool
    status: Optional[OrderStatus] = None
    error: Optional[str] = None
