"""
ecommerce.py — End-to-end Demo of the Order Workflow

Wires the in-memory repositories and the simulated collaborators into an
`OrderOrchestrator`, seeds a customer and a small catalogue, and walks
orders through creation, payment, shipping and concurrent batch payment.
"""

from order_service.config import Config
from order_service.errors import OrderWorkflowError
from order_service.models import Customer, Product
from order_service.repository import CustomerRepository, OrderRepository, ProductRepository
from order_service.workflow import OrderOrchestrator

DEMO_CUSTOMERS = [
    Customer(id="cust1", name="John Doe", email="john@example.com"),
    Customer(id="cust2", name="Jane Smith", email="jane@example.com"),
]

DEMO_PRODUCTS = [
    Product(id="prod1", name="Laptop", category="Electronics", price=999.99, stock_level=10),
    Product(id="prod2", name="Headphones", category="Electronics", price=149.99, stock_level=20),
    Product(id="prod3", name="T-shirt", category="Clothing", price=24.99, stock_level=50),
]


def build_orchestrator(**overrides) -> OrderOrchestrator:
    """Creates an orchestrator backed by empty in-memory repositories."""
    customers = CustomerRepository()
    products = ProductRepository()
    orders = OrderRepository()
    return OrderOrchestrator(customers, products, orders, **overrides)


def seed_demo_data(orchestrator: OrderOrchestrator) -> OrderOrchestrator:
    for customer in DEMO_CUSTOMERS:
        orchestrator.customers.put(customer)
    for product in DEMO_PRODUCTS:
        orchestrator.products.put(product)
    return orchestrator


def main():
    print("=== E-commerce Order Processing Demo ===")
    service = seed_demo_data(build_orchestrator())
    currency = Config.CURRENCY

    print("\n--- Creating Order ---")
    order = service.create_order("cust1", {"prod1": 1, "prod2": 2})
    print(f"Created order {order.id} with {len(order.items)} items, status {order.status.value}")
    print(f"Order Total: {currency} {order.total:.2f}")

    print("\n--- Processing Payment ---")
    paid = service.process_payment(order.id, "credit_card")
    print(f"Payment processed. Order status: {paid.status.value}")
    print(f"Payment details: {paid.payment.transaction_id} via {paid.payment.method}, "
          f"{currency} {paid.payment.amount:.2f}")

    print("\n--- Shipping Order ---")
    shipped = service.ship_order(order.id, "123 Main St, New York, NY 10001")
    print(f"Order shipped. Status: {shipped.status.value}, tracking code {shipped.shipping.tracking_code}")

    print("\n--- Rejected Orders ---")
    for customer_id, request in [("nobody", {"prod1": 1}), ("cust1", {"prod1": 100})]:
        try:
            service.create_order(customer_id, request)
        except OrderWorkflowError as e:
            print(f"Rejected: {e}")

    print("\n--- Batch Processing Orders ---")
    batch = [service.create_order("cust1", {"prod3": 1}).id for _ in range(3)]
    batch.append("missing-order")
    for outcome in service.process_orders_batch(batch, "paypal"):
        result = "paid" if outcome.success else f"failed ({outcome.error})"
        print(f" - Order {outcome.order_id}: {result}")

    print("\n--- Retrieving Customer Orders ---")
    customer_orders = service.orders_for_customer("cust1")
    print(f"Found {len(customer_orders)} orders for customer:")
    for customer_order in sorted(customer_orders, key=lambda o: o.created_at):
        print(f" - Order {customer_order.id}: {customer_order.status.value}, "
              f"Total: {currency} {customer_order.total:.2f}")

    print("\n--- Updated Product Inventory ---")
    for product in service.products.list_by(lambda p: True):
        print(f"{product.id}: {product.name} ({product.stock_level} in stock)")

    print("\nDemo completed successfully!")


if __name__ == '__main__':
    main()
