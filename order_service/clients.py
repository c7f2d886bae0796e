"""
This module provides the collaborators used by the order workflow:
- Inventory (availability checks, reservation and release of stock)
- Payment (charge confirmation)
- Shipping (tracking confirmation)
- Notification (messages to customers)
Each class encapsulates one concern so that the orchestrator can be wired
with substitutes in tests. Payment, shipping and notification are local
simulations and never fail on their own.
"""

import threading
import uuid
from typing import Iterable, Protocol

from .config import Config
from .errors import InsufficientStock, ProductNotFound
from .logging_config import get_logger
from .models import Order, OrderItem, PaymentRecord, ShippingRecord
from .repository import ProductRepository

log = get_logger(__name__)


# --- Inventory ---
class InventoryClient:
    """
    Answers availability questions and moves stock for the product repository.
    Every read-decide-write sequence runs under a single inventory lock, so
    concurrent reservations cannot both pass the check and oversell a product.
    """
    def __init__(self, products: ProductRepository):
        self.products = products
        self._lock = threading.RLock()

    def check_availability(self, product_id: str, quantity: int) -> bool:
        """
        Returns True if the product exists and has at least `quantity` units in stock.
        """
        product = self.products.get(product_id)
        return product is not None and product.stock_level >= quantity

    def reserve(self, product_id: str, quantity: int):
        """
        Decrements the stock of a single product.
        Raises:
            ProductNotFound: If the product does not exist.
            InsufficientStock: If the new stock level would be negative. No stock is changed.
        """
        with self._lock:
            product = self.products.get(product_id)
            if product is None:
                raise ProductNotFound([product_id])
            new_level = product.stock_level - quantity
            if new_level < 0:
                log.warning(f"[Inventory] Not enough stock for {product_id}: "
                            f"{product.stock_level} available, {quantity} requested.")
                raise InsufficientStock([product_id])
            self.products.update_stock(product_id, new_level)
            log.debug(f"[Inventory] Reserved {quantity} x {product_id}, {new_level} left.")

    def reserve_items(self, items: Iterable[OrderItem]):
        """
        Reserves stock for all items or for none of them.
        Args:
            items: Order items with 'product_id' and 'quantity'.
        Raises:
            ProductNotFound: If any product does not exist.
            InsufficientStock: Listing every product that cannot be served.
        """
        items = list(items)
        with self._lock:
            missing = [i.product_id for i in items if self.products.get(i.product_id) is None]
            if missing:
                raise ProductNotFound(missing)
            requested = {}
            for item in items:
                requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity
            short = [pid for pid, qty in requested.items() if not self.check_availability(pid, qty)]
            if short:
                raise InsufficientStock(short)
            for product_id, quantity in requested.items():
                self.reserve(product_id, quantity)

    def release_items(self, items: Iterable[OrderItem]):
        """
        Compensation: puts the quantities of previously reserved items back into stock.
        Products that disappeared in the meantime are logged and skipped.
        """
        with self._lock:
            for item in items:
                product = self.products.get(item.product_id)
                if product is None:
                    log.critical(f"[Inventory] Cannot release {item.quantity} x {item.product_id}: "
                                 f"product no longer exists. Manual action required!")
                    continue
                self.products.update_stock(item.product_id, product.stock_level + item.quantity)
                log.info(f"[Inventory] Compensation: released {item.quantity} x {item.product_id}.")


# --- Payment ---
class PaymentClient:
    """
    Simulated payment provider. Every charge succeeds and gets a fresh transaction id.
    """
    def process_payment(self, customer_id: str, amount: float, method: str) -> PaymentRecord:
        """
        Creates a payment confirmation.
        Args:
            customer_id (str): The paying customer.
            amount (float): Charged amount.
            method (str): Payment method, e.g. 'credit_card' or 'paypal'.
        Returns:
            PaymentRecord: Transaction details.
        """
        record = PaymentRecord(
            transaction_id=f"tr_{uuid.uuid4()}",
            method=method,
            amount=amount,
        )
        log.info(f"[Payment] Charged {amount:.2f} {Config.CURRENCY} to customer {customer_id} "
                 f"via {method}. (TxID: {record.transaction_id})")
        return record


# --- Shipping ---
class ShippingClient:
    """
    Simulated carrier. Hands out tracking codes for shipped orders.
    """
    def __init__(self, tracking_prefix: str = None):
        self.tracking_prefix = Config.TRACKING_PREFIX if tracking_prefix is None else tracking_prefix

    def ship(self, order: Order, address: str) -> ShippingRecord:
        tracking_code = f"{self.tracking_prefix}{uuid.uuid4().hex[:8].upper()}"
        log.info(f"[Order: {order.id}] Shipment handed to carrier. Tracking code: {tracking_code}")
        return ShippingRecord(order_id=order.id, address=address, tracking_code=tracking_code)


# --- Notification ---
class NotificationSink(Protocol):
    """Anything that can deliver a message to a customer."""

    def notify(self, customer_id: str, message: str) -> None:
        ...


class LoggingNotificationSink:
    """Delivers notifications by writing them to the log."""

    def notify(self, customer_id: str, message: str) -> None:
        log.info(f"[Notification] To customer {customer_id}: {message}")
