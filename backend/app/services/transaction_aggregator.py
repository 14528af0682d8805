"""
Category aggregation over a user's transactions.

Categories are used verbatim as keys: "Food", "food" and "" are three different
buckets. There is no "Uncategorized" fallback.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from app.services.transaction_store import TransactionRecord, TransactionStore


@dataclass
class CategoryBucket:
    """Per-category sums split by type and fixedness."""
    category: str
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    fixed_expense: Decimal = Decimal("0")
    variable_expense: Decimal = Decimal("0")


@dataclass
class AggregationResult:
    transactions: List[TransactionRecord]
    buckets: Dict[str, CategoryBucket] = field(default_factory=dict)


def build_category_buckets(transactions: Iterable[TransactionRecord]) -> Dict[str, CategoryBucket]:
    """Single pass over the records, summing each into its category bucket."""
    buckets: Dict[str, CategoryBucket] = {}
    for tx in transactions:
        bucket = buckets.get(tx.category)
        if bucket is None:
            bucket = CategoryBucket(category=tx.category)
            buckets[tx.category] = bucket

        if tx.is_income:
            bucket.income += tx.amount
        elif tx.is_expense:
            bucket.expense += tx.amount
            if tx.is_fixed:
                bucket.fixed_expense += tx.amount
            else:
                bucket.variable_expense += tx.amount
    return buckets


def sum_by_type(transactions: Iterable[TransactionRecord]) -> Dict[str, Decimal]:
    """Total income and expense of the given records."""
    totals = {"income": Decimal("0"), "expense": Decimal("0")}
    for tx in transactions:
        if tx.is_income:
            totals["income"] += tx.amount
        elif tx.is_expense:
            totals["expense"] += tx.amount
    return totals


class TransactionAggregator:
    """Scans a user's transactions inside a time window."""

    def __init__(self, store: TransactionStore):
        self.store = store

    def aggregate(
        self,
        user_id: str,
        date_from: Optional[datetime] = None,
        with_buckets: bool = False,
    ) -> AggregationResult:
        transactions = self.store.query(user_id, date_from=date_from)
        result = AggregationResult(transactions=transactions)
        if with_buckets:
            result.buckets = build_category_buckets(transactions)
        return result
