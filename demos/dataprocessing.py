"""
dataprocessing.py — Sales Data Aggregation

Aggregates in-memory sales records into per-category summaries and
month-by-month reports with growth figures and top categories.
"""

import datetime as dt
from collections import defaultdict
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict

from order_service.config import Config


class SalesRecord(BaseModel):
    """
    A single sale.

    Attributes:
        id (str): Record identifier.
        product (str): Product name.
        category (str): Product category.
        price (float): Unit price.
        quantity (int): Units sold.
        date (date): Day of the sale.
        is_valid (bool): False for records that must be ignored by every report.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    product: str
    category: str
    price: float
    quantity: int
    date: dt.date
    is_valid: bool = True

    @property
    def total_amount(self) -> float:
        return self.price * self.quantity


class CategorySummary(BaseModel):
    category: str
    total_sales: float
    average_price: float
    total_products: int

    def __str__(self):
        return (f"Category: {self.category}, Total Sales: {Config.CURRENCY}{self.total_sales:.2f}, "
                f"Avg Price: {Config.CURRENCY}{self.average_price:.2f}, "
                f"Products Sold: {self.total_products}")


class MonthlySalesReport(BaseModel):
    year: int
    month: int
    total_sales: float
    growth: float  # percent change against the previous month
    top_categories: List[str]

    def __str__(self):
        return (f"{self.year}-{self.month:02d}: Sales {Config.CURRENCY}{self.total_sales:.2f}, "
                f"Growth: {self.growth:.1f}%, Top Categories: {', '.join(self.top_categories)}")


def analyze_sales(records: List[SalesRecord]) -> List[CategorySummary]:
    """
    Summarises valid records per category.

    Returns:
        List[CategorySummary]: One summary per category, highest total sales first.
            `total_products` counts the records of the category.
    """
    by_category: Dict[str, List[SalesRecord]] = defaultdict(list)
    for record in records:
        if record.is_valid:
            by_category[record.category].append(record)

    summaries = [
        CategorySummary(
            category=category,
            total_sales=sum(r.total_amount for r in group),
            average_price=sum(r.price for r in group) / len(group),
            total_products=len(group),
        )
        for category, group in by_category.items()
    ]
    return sorted(summaries, key=lambda s: s.total_sales, reverse=True)


def generate_monthly_reports(records: List[SalesRecord], top_n: int = 3) -> List[MonthlySalesReport]:
    """
    Builds one report per (year, month) that has valid sales, in chronological order.

    Growth is measured against the immediately preceding calendar month
    (December of the previous year for January) and is 0.0 when that month
    has no sales.
    """
    by_month: Dict[Tuple[int, int], List[SalesRecord]] = defaultdict(list)
    for record in records:
        if record.is_valid:
            by_month[(record.date.year, record.date.month)].append(record)

    totals = {key: sum(r.total_amount for r in group) for key, group in by_month.items()}

    reports = []
    for (year, month) in sorted(by_month):
        total = totals[(year, month)]
        previous = totals.get((year, month - 1) if month > 1 else (year - 1, 12), 0.0)
        growth = (total - previous) / previous * 100 if previous > 0 else 0.0

        category_sales: Dict[str, float] = defaultdict(float)
        for record in by_month[(year, month)]:
            category_sales[record.category] += record.total_amount
        top = sorted(category_sales, key=category_sales.get, reverse=True)[:top_n]

        reports.append(MonthlySalesReport(
            year=year, month=month, total_sales=total, growth=growth, top_categories=top,
        ))
    return reports


DEMO_RECORDS = [
    SalesRecord(id="1", product="Laptop", category="Electronics", price=999.99, quantity=1, date=dt.date(2023, 1, 15)),
    SalesRecord(id="2", product="T-shirt", category="Clothing", price=24.99, quantity=3, date=dt.date(2023, 1, 20)),
    SalesRecord(id="3", product="Headphones", category="Electronics", price=149.99, quantity=2, date=dt.date(2023, 1, 25)),
    SalesRecord(id="4", product="Book", category="Media", price=19.99, quantity=5, date=dt.date(2023, 2, 5)),
    SalesRecord(id="5", product="Smartphone", category="Electronics", price=799.99, quantity=1, date=dt.date(2023, 2, 10)),
    SalesRecord(id="6", product="Jeans", category="Clothing", price=49.99, quantity=2, date=dt.date(2023, 2, 15)),
    SalesRecord(id="7", product="Tablet", category="Electronics", price=349.99, quantity=1, date=dt.date(2023, 3, 2)),
    SalesRecord(id="8", product="Movie", category="Media", price=14.99, quantity=3, date=dt.date(2023, 3, 8)),
    SalesRecord(id="9", product="Sweater", category="Clothing", price=39.99, quantity=2, date=dt.date(2023, 3, 15)),
    SalesRecord(id="10", product="Invalid Item", category="Unknown", price=0.0, quantity=0,
                date=dt.date(2023, 3, 20), is_valid=False),
]


def main():
    print("=== Basic Sales Analysis ===")
    for summary in analyze_sales(DEMO_RECORDS):
        print(summary)

    print("\n=== Monthly Sales Reports ===")
    for report in generate_monthly_reports(DEMO_RECORDS):
        print(report)


if __name__ == '__main__':
    main()
