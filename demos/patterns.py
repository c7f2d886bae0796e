"""
patterns.py — Design Patterns

Strategy, Factory, Observer and Builder, each in a small self-contained form.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from order_service.logging_config import get_logger

log = get_logger(__name__)


# --- Strategy ---
def bubble_sort(values: List) -> List:
    result = list(values)
    n = len(result)
    for i in range(n - 1):
        for j in range(n - i - 1):
            if result[j] > result[j + 1]:
                result[j], result[j + 1] = result[j + 1], result[j]
    return result


def merge_sort(values: List) -> List:
    if len(values) <= 1:
        return list(values)
    middle = len(values) // 2
    left, right = merge_sort(values[:middle]), merge_sort(values[middle:])
    merged = []
    while left and right:
        merged.append(left.pop(0) if left[0] <= right[0] else right.pop(0))
    return merged + left + right


def quick_sort(values: List) -> List:
    if len(values) <= 1:
        return list(values)
    pivot, rest = values[0], values[1:]
    return (quick_sort([v for v in rest if v < pivot]) + [pivot]
            + quick_sort([v for v in rest if v >= pivot]))


SORT_STRATEGIES: Dict[str, Callable[[List], List]] = {
    "bubble": bubble_sort,
    "merge": merge_sort,
    "quick": quick_sort,
}


class Sorter:
    """Sorts with an interchangeable strategy."""

    def __init__(self, strategy: str = "quick"):
        self.set_strategy(strategy)

    def set_strategy(self, strategy: str):
        if strategy not in SORT_STRATEGIES:
            raise ValueError(f"Unknown sort strategy: {strategy}")
        self.name = strategy
        self.strategy = SORT_STRATEGIES[strategy]

    def sort(self, values: List) -> List:
        log.debug(f"Sorting {len(values)} values with {self.name} sort")
        return self.strategy(values)


# --- Factory ---
class Document(ABC):
    kind = "document"

    def open(self) -> str:
        return f"Opening {self.kind}"

    @abstractmethod
    def save(self) -> str:
        ...


class PDFDocument(Document):
    kind = "PDF"

    def save(self) -> str:
        return "Saving PDF"


class WordDocument(Document):
    kind = "Word doc"

    def save(self) -> str:
        return "Saving Word doc"


class SpreadsheetDocument(Document):
    kind = "spreadsheet"

    def save(self) -> str:
        return "Saving spreadsheet"


DOCUMENT_TYPES = {"pdf": PDFDocument, "word": WordDocument, "spreadsheet": SpreadsheetDocument}


def create_document(doc_type: str) -> Document:
    try:
        return DOCUMENT_TYPES[doc_type.lower()]()
    except KeyError:
        raise ValueError(f"Unknown document type: {doc_type}") from None


# --- Observer ---
class StockMarket:
    """Holds stock prices and tells every subscriber about each change."""

    def __init__(self):
        self.prices: Dict[str, float] = {}
        self._observers: List[Callable[[str, Optional[float], float], None]] = []

    def subscribe(self, observer: Callable[[str, Optional[float], float], None]):
        self._observers.append(observer)

    def unsubscribe(self, observer):
        self._observers.remove(observer)

    def set_price(self, symbol: str, price: float):
        old = self.prices.get(symbol)
        self.prices[symbol] = price
        for observer in list(self._observers):
            observer(symbol, old, price)


class StockDisplay:

    def __init__(self):
        self.lines: List[str] = []

    def __call__(self, symbol, old, new):
        self.lines.append(f"{symbol}: {old if old is not None else '-'} -> {new:.2f}")


class StockAlert:
    """Records an alert whenever a price crosses its configured threshold."""

    def __init__(self, thresholds: Dict[str, float]):
        self.thresholds = thresholds
        self.alerts: List[str] = []

    def __call__(self, symbol, old, new):
        threshold = self.thresholds.get(symbol)
        if threshold is not None and new > threshold and (old is None or old <= threshold):
            self.alerts.append(f"ALERT: {symbol} above {threshold:.2f} at {new:.2f}")


# --- Builder ---
class Email:

    def __init__(self, sender, to, subject, body, cc, bcc, headers):
        self.sender = sender
        self.to = tuple(to)
        self.subject = subject
        self.body = body
        self.cc = tuple(cc)
        self.bcc = tuple(bcc)
        self.headers = dict(headers)

    def __str__(self):
        cc = f"\nCC: {', '.join(self.cc)}" if self.cc else ""
        return f"From: {self.sender}\nTo: {', '.join(self.to)}{cc}\nSubject: {self.subject}\n\n{self.body}"


class EmailBuilder:
    """Fluent builder; `build()` validates that sender and at least one recipient are set."""

    def __init__(self):
        self._sender = None
        self._to, self._cc, self._bcc = [], [], []
        self._subject, self._body = "", ""
        self._headers: Dict[str, str] = {}

    def sender(self, address: str) -> "EmailBuilder":
        self._sender = address
        return self

    def to(self, *addresses: str) -> "EmailBuilder":
        self._to.extend(addresses)
        return self

    def cc(self, *addresses: str) -> "EmailBuilder":
        self._cc.extend(addresses)
        return self

    def bcc(self, *addresses: str) -> "EmailBuilder":
        self._bcc.extend(addresses)
        return self

    def subject(self, subject: str) -> "EmailBuilder":
        self._subject = subject
        return self

    def body(self, body: str) -> "EmailBuilder":
        self._body = body
        return self

    def header(self, key: str, value: str) -> "EmailBuilder":
        self._headers[key] = value
        return self

    def build(self) -> Email:
        if not self._sender:
            raise ValueError("Email needs a sender")
        if not self._to:
            raise ValueError("Email needs at least one recipient")
        return Email(self._sender, self._to, self._subject, self._body,
                     self._cc, self._bcc, self._headers)


def main():
    print("=== Strategy Pattern ===")
    numbers = [5, 3, 9, 1, 7, 2, 8, 4, 6]
    print(f"Original list: {numbers}")
    sorter = Sorter()
    for name in SORT_STRATEGIES:
        sorter.set_strategy(name)
        print(f"{name} sort result: {sorter.sort(numbers)}")

    print("\n=== Factory Pattern ===")
    for doc_type in DOCUMENT_TYPES:
        document = create_document(doc_type)
        print(f"{document.open()} / {document.save()}")

    print("\n=== Observer Pattern ===")
    market, display, alert = StockMarket(), StockDisplay(), StockAlert({"AAPL": 180.0})
    market.subscribe(display)
    market.subscribe(alert)
    for symbol, price in [("AAPL", 175.0), ("GOOG", 140.5), ("AAPL", 182.3), ("AAPL", 185.0)]:
        market.set_price(symbol, price)
    for line in display.lines + alert.alerts:
        print(line)

    print("\n=== Builder Pattern ===")
    email = (EmailBuilder()
             .sender("shop@example.com")
             .to("john@example.com")
             .cc("support@example.com")
             .subject("Your order has shipped")
             .body("Your parcel is on its way.")
             .header("X-Priority", "1")
             .build())
    print(email)


if __name__ == '__main__':
    main()
