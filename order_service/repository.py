"""
repository.py — In-Memory Entity Store

Keyed collections for customers, products and orders standing in for a
database. Each repository guards its map with its own lock so it can be read
and written from several worker threads at once. Multi-step sequences that
span reads and writes (e.g. stock reservation) need their own locking on top
of this, see `InventoryClient`.
"""

import threading
from typing import Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from .models import Customer, Order, Product

T = TypeVar("T")


class InMemoryRepository(Generic[T]):
    """
    Thread-safe map of entities keyed by their `id` attribute.
    Writing an entity with an existing id replaces it (last write wins).
    """

    def __init__(self, entities: Iterable[T] = ()):
        self._items: Dict[str, T] = {}
        self._lock = threading.Lock()
        for entity in entities:
            self.put(entity)

    def get(self, entity_id: str) -> Optional[T]:
        with self._lock:
            return self._items.get(entity_id)

    def put(self, entity: T) -> None:
        with self._lock:
            self._items[entity.id] = entity

    def list_by(self, predicate: Callable[[T], bool]) -> List[T]:
        with self._lock:
            snapshot = list(self._items.values())
        return [entity for entity in snapshot if predicate(entity)]

    def find_all_by_id(self, entity_ids: Iterable[str]) -> List[T]:
        """Returns the entities found for `entity_ids`; unknown ids are skipped."""
        with self._lock:
            return [self._items[i] for i in entity_ids if i in self._items]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class CustomerRepository(InMemoryRepository[Customer]):
    pass


class ProductRepository(InMemoryRepository[Product]):

    def update_stock(self, product_id: str, stock_level: int) -> Optional[Product]:
        """
        Replaces the stock level of an existing product.

        Returns:
            Optional[Product]: The updated product, or None if it does not exist.
        """
        with self._lock:
            product = self._items.get(product_id)
            if product is None:
                return None
            updated = product.with_stock(stock_level)
            self._items[product_id] = updated
            return updated


class OrderRepository(InMemoryRepository[Order]):

    def find_by_customer(self, customer_id: str) -> List[Order]:
        return self.list_by(lambda order: order.customer_id == customer_id)
