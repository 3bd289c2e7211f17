"""Summary statistics computed from report records before drawing."""
from __future__ import annotations

from collections import Counter
from datetime import date
from itertools import groupby
from typing import Callable, Iterable, Sequence, TypeVar

from farmacia_reports.core.models import (
    CategoryTotal,
    InventorySummary,
    Product,
    SalesSummary,
    StockLevel,
    Transaction,
)

T = TypeVar("T")

UNCATEGORIZED = "Sin categoría"
STOCK_LEVELS: tuple[StockLevel, ...] = ("critical", "low", "normal", "high")
TRANSACTION_STATUSES = ("completed", "pending", "cancelled")


def stock_level(stock: int, reorder_level: int) -> StockLevel:
    """Bucket a stock quantity against its reorder level.

    critical: at most half the reorder level; low: at most the reorder level;
    normal: at most twice the reorder level; high: above that.
    """
    if stock <= reorder_level * 0.5:
        return "critical"
    if stock <= reorder_level:
        return "low"
    if stock <= reorder_level * 2:
        return "normal"
    return "high"


def effective_reorder_level(product: Product, default_reorder_level: int) -> int:
    return product.reorder_level if product.reorder_level is not None else default_reorder_level


def product_stock_level(product: Product, default_reorder_level: int) -> StockLevel:
    return stock_level(product.stock, effective_reorder_level(product, default_reorder_level))


def needs_reorder(product: Product, default_reorder_level: int) -> bool:
    return product_stock_level(product, default_reorder_level) in ("critical", "low")


def _group_sorted(rows: Iterable[T], key_fn: Callable[[T], str]) -> list[tuple[str, list[T]]]:
    sorted_rows = sorted(rows, key=lambda row: key_fn(row).lower())
    return [(key, list(group)) for key, group in groupby(sorted_rows, key=key_fn)]


def category_totals(products: Sequence[Product]) -> list[CategoryTotal]:
    """Per-category product count, units and value, largest unit count first."""
    totals = [
        CategoryTotal(
            label=label,
            products=len(group),
            units=sum(product.stock for product in group),
            value=round(sum(product.stock * product.price for product in group), 2),
        )
        for label, group in _group_sorted(products, lambda product: product.category or UNCATEGORIZED)
    ]
    return sorted(totals, key=lambda total: total.units, reverse=True)


def inventory_summary(products: Sequence[Product], default_reorder_level: int = 10) -> InventorySummary:
    levels = Counter(product_stock_level(product, default_reorder_level) for product in products)
    stock_levels = {level: levels.get(level, 0) for level in STOCK_LEVELS}
    return InventorySummary(
        total_products=len(products),
        total_units=sum(product.stock for product in products),
        inventory_value=round(sum(product.stock * product.price for product in products), 2),
        low_stock_count=stock_levels["critical"] + stock_levels["low"],
        stock_levels=stock_levels,
        categories=category_totals(products),
    )


def daily_totals(transactions: Sequence[Transaction]) -> list[tuple[date, float]]:
    by_day: dict[date, float] = {}
    for transaction in transactions:
        day = transaction.date.date()
        by_day[day] = by_day.get(day, 0.0) + transaction.amount
    return [(day, round(total, 2)) for day, total in sorted(by_day.items())]


def customer_totals(transactions: Sequence[Transaction]) -> list[tuple[str, float]]:
    by_customer: dict[str, float] = {}
    for transaction in transactions:
        by_customer[transaction.customer] = by_customer.get(transaction.customer, 0.0) + transaction.amount
    # ties keep alphabetical order so repeated builds draw identical charts
    ordered = sorted(by_customer.items(), key=lambda item: (-item[1], item[0].lower()))
    return [(customer, round(total, 2)) for customer, total in ordered]


def sales_trend(transactions: Sequence[Transaction]) -> float | None:
    """Percent change of the second half of the period over the first half."""
    if len(transactions) < 2:
        return None
    ordered = sorted(transactions, key=lambda transaction: (transaction.date, transaction.id))
    middle = len(ordered) // 2
    first = sum(transaction.amount for transaction in ordered[:middle])
    second = sum(transaction.amount for transaction in ordered[middle:])
    if first <= 0:
        return None
    return round((second - first) / first * 100, 1)


def sales_summary(transactions: Sequence[Transaction]) -> SalesSummary:
    total_amount = sum(transaction.amount for transaction in transactions)
    statuses = Counter(transaction.status for transaction in transactions)
    count = len(transactions)
    return SalesSummary(
        total_transactions=count,
        total_amount=round(total_amount, 2),
        completed_amount=round(
            sum(transaction.amount for transaction in transactions if transaction.status == "completed"), 2
        ),
        average_ticket=round(total_amount / count, 2) if count else 0.0,
        total_items=sum(transaction.items for transaction in transactions),
        status_counts={status: statuses.get(status, 0) for status in TRANSACTION_STATUSES},
        daily_totals=daily_totals(transactions),
        customer_totals=customer_totals(transactions),
        trend_percent=sales_trend(transactions),
    )
