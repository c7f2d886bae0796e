"""
workflow.py — Core Orchestration Logic for Order Processing

This module contains the orchestrator that drives an order through its
lifecycle. It coordinates the repositories and the collaborators
(Inventory, Payment, Shipping, Notification) in the correct sequence.

Workflow Overview:
1. Create the order after validating customer, products and availability
2. Reserve stock and process the payment (with compensation on failure)
3. Prepare and ship the order
4. Pay many orders concurrently and collect one outcome per order
"""

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Mapping

from .clients import (InventoryClient, LoggingNotificationSink, NotificationSink,
                      PaymentClient, ShippingClient)
from .config import Config
from .errors import (CustomerNotFound, InsufficientStock, InvalidQuantity, InvalidState,
                     OrderNotFound, OrderWorkflowError, ProductNotFound)
from .logging_config import get_logger
from .models import Order, OrderItem, OrderStatus, PaymentOutcome
from .repository import CustomerRepository, OrderRepository, ProductRepository

log = get_logger(__name__)


class OrderOrchestrator:
    """
    Sequences the collaborators to create, pay and ship orders.

    Orders are never mutated in place. Every status change stores a new
    `Order` value in the order repository.
    """

    def __init__(
            self,
            customers: CustomerRepository,
            products: ProductRepository,
            orders: OrderRepository,
            inventory: InventoryClient = None,
            payments: PaymentClient = None,
            notifications: NotificationSink = None,
            shipping: ShippingClient = None,
            max_workers: int = None,
    ):
        self.customers = customers
        self.products = products
        self.orders = orders
        self.inventory = inventory or InventoryClient(products)
        self.payments = payments or PaymentClient()
        self.notifications = notifications or LoggingNotificationSink()
        self.shipping = shipping or ShippingClient()
        self.max_workers = max_workers or Config.BATCH_MAX_WORKERS

        self._order_locks: Dict[str, threading.Lock] = {}
        self._order_locks_guard = threading.Lock()

    def create_order(self, customer_id: str, product_quantities: Mapping[str, int]) -> Order:
        """
        Creates a new order in status CREATED.

        Args:
            customer_id (str): The ordering customer.
            product_quantities (Mapping[str, int]): Requested quantity per product id.

        Returns:
            Order: The stored order with unit prices captured from the current catalogue.

        Raises:
            CustomerNotFound: If the customer does not exist.
            ProductNotFound: Listing every unknown product id.
            InvalidQuantity: Listing every product with a quantity below one.
            InsufficientStock: Listing every product without enough stock.
                No order is stored in any failure case.
        """
        log.info(f"[Customer: {customer_id}] Creating order for {dict(product_quantities)}.")

        if self.customers.get(customer_id) is None:
            raise CustomerNotFound(customer_id)

        products = {p.id: p for p in self.products.find_all_by_id(product_quantities)}
        missing = [pid for pid in product_quantities if pid not in products]
        if missing:
            raise ProductNotFound(missing)

        non_positive = [pid for pid, quantity in product_quantities.items() if quantity <= 0]
        if non_positive:
            raise InvalidQuantity(non_positive)

        unavailable = [
            pid for pid, quantity in product_quantities.items()
            if not self.inventory.check_availability(pid, quantity)
        ]
        if unavailable:
            log.warning(f"[Customer: {customer_id}] Rejected: not available {unavailable}.")
            raise InsufficientStock(unavailable)

        items = tuple(
            OrderItem(product_id=pid, quantity=quantity, price=products[pid].price)
            for pid, quantity in product_quantities.items()
        )
        order = Order(id=str(uuid.uuid4()), customer_id=customer_id, items=items)
        self.orders.put(order)
        log.info(f"[Order: {order.id}] Created. Total: {order.total:.2f} {Config.CURRENCY}")

        self._notify(order, f"Your order {order.id} has been created successfully.")
        return order

    def process_payment(self, order_id: str, method: str) -> Order:
        """
        Reserves stock for an order, charges it and moves it to PAID.

        Stock is reserved before the charge. If charging fails, the reservation
        is released again and the order stays CREATED.

        Raises:
            OrderNotFound: If the order does not exist.
            InvalidState: If the order is not CREATED.
            InsufficientStock: If stock ran out since the order was created.
        """
        log_prefix = f"[Order: {order_id}]"

        with self._lock_for(order_id):
            order = self._get_order(order_id)
            if order.status is not OrderStatus.CREATED:
                raise InvalidState(order_id, OrderStatus.CREATED, order.status)

            log.info(f"{log_prefix} Step 1: Reserving inventory...")
            self.inventory.reserve_items(order.items)

            log.info(f"{log_prefix} Step 2: Processing payment ({method})...")
            try:
                payment = self.payments.process_payment(order.customer_id, order.total, method)
            except Exception as e:
                log.error(f"{log_prefix} Payment failed ({e}). Starting compensation.")
                try:
                    self.inventory.release_items(order.items)
                except Exception as comp_e:
                    log.critical(f"{log_prefix} CRITICAL: Compensation failed! {comp_e}")
                    raise
                raise

            paid = order.transition(OrderStatus.PAID, payment=payment)
            self.orders.put(paid)
            log.info(f"{log_prefix} Paid. (TxID: {payment.transaction_id})")

        self._notify(paid, f"Payment for order {order_id} has been processed successfully.")
        return paid

    def ship_order(self, order_id: str, address: str) -> Order:
        """
        Moves a PAID order through PREPARING to SHIPPED.

        If the carrier fails, the PAID order is stored again so shipping can
        be retried.

        Raises:
            OrderNotFound: If the order does not exist.
            InvalidState: If the order is not PAID.
        """
        log_prefix = f"[Order: {order_id}]"

        with self._lock_for(order_id):
            order = self._get_order(order_id)
            if order.status is not OrderStatus.PAID:
                raise InvalidState(order_id, OrderStatus.PAID, order.status)

            preparing = order.transition(OrderStatus.PREPARING)
            self.orders.put(preparing)
            log.info(f"{log_prefix} Preparing shipment to '{address}'.")

            try:
                shipping = self.shipping.ship(preparing, address)
            except Exception as e:
                log.error(f"{log_prefix} Shipping failed ({e}). Reverting order to PAID.")
                self.orders.put(order)
                raise

            shipped = preparing.transition(OrderStatus.SHIPPED, shipping=shipping)
            self.orders.put(shipped)

        # SHIPPED is terminal, nothing locks this order again.
        self._discard_lock(order_id)

        self._notify(
            shipped,
            f"Your order {order_id} has been shipped. Tracking code: {shipping.tracking_code}",
        )
        return shipped

    def process_orders_batch(self, order_ids: List[str], method: str) -> List[PaymentOutcome]:
        """
        Processes the payment of several orders concurrently.

        Every order is handled by its own task. A failure is logged and
        recorded in that order's outcome without affecting the other tasks.
        The call returns once every task has finished.

        Returns:
            List[PaymentOutcome]: One outcome per submitted id, in submission order.
        """
        order_ids = list(order_ids)
        log.info(f"[Batch] Processing payment for {len(order_ids)} orders ({method}).")
        if not order_ids:
            return []

        workers = min(self.max_workers, len(order_ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="batch-payment") as executor:
            futures = [executor.submit(self._pay_one, order_id, method) for order_id in order_ids]
            outcomes = [future.result() for future in futures]

        failed = sum(1 for o in outcomes if not o.success)
        log.info(f"[Batch] Finished: {len(outcomes) - failed} paid, {failed} failed.")
        return outcomes

    def orders_for_customer(self, customer_id: str) -> List[Order]:
        return self.orders.find_by_customer(customer_id)

    def _pay_one(self, order_id: str, method: str) -> PaymentOutcome:
        try:
            order = self.process_payment(order_id, method)
            return PaymentOutcome(order_id=order_id, success=True, status=order.status)
        except OrderWorkflowError as e:
            log.warning(f"[Order: {order_id}] Batch payment rejected: {e}")
            error = str(e)
        except Exception as e:
            log.exception(f"[Order: {order_id}] Unexpected error during batch payment: {e}")
            error = f"{type(e).__name__}: {e}"
        current = self.orders.get(order_id)
        return PaymentOutcome(
            order_id=order_id,
            success=False,
            status=current.status if current else None,
            error=error,
        )

    def _get_order(self, order_id: str) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def _lock_for(self, order_id: str) -> threading.Lock:
        """Returns the lock serialising changes to one order. Unknown ids get no lock."""
        order = self._get_order(order_id)
        if order.status is OrderStatus.SHIPPED:
            # Shipped orders never change again.
            return threading.Lock()
        with self._order_locks_guard:
            return self._order_locks.setdefault(order_id, threading.Lock())

    def _discard_lock(self, order_id: str):
        with self._order_locks_guard:
            self._order_locks.pop(order_id, None)

    def _notify(self, order: Order, message: str):
        # Best-effort: a failing notification never fails the operation.
        try:
            self.notifications.notify(order.customer_id, message)
        except Exception as e:
            log.warning(f"[Order: {order.id}] Notification to {order.customer_id} failed: {e}")
