"""
Income/expense statistics for a period (week, month, year or all history).
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Optional

from app.services.errors import ValidationError
from app.services.transaction_aggregator import CategoryBucket, TransactionAggregator
from app.services.transaction_store import TransactionStore

PERIODS = ("week", "month", "year")


@dataclass
class PeriodStats:
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    fixed_expense: Decimal = Decimal("0")
    variable_expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    category_summary: Dict[str, CategoryBucket] = field(default_factory=dict)


def period_start(period: Optional[str], now: datetime) -> Optional[datetime]:
    """Lower bound of the period; weeks start on Sunday."""
    if not period:
        return None
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        # weekday(): Monday=0 .. Sunday=6
        return midnight - timedelta(days=(now.weekday() + 1) % 7)
    if period == "month":
        return midnight.replace(day=1)
    if period == "year":
        return midnight.replace(month=1, day=1)
    raise ValidationError(f"period must be one of {', '.join(PERIODS)}, got '{period}'.")


def get_period_stats(
    store: TransactionStore,
    user_id: str,
    period: Optional[str] = None,
    now: Optional[datetime] = None,
) -> PeriodStats:
    date_from = period_start(period, now or datetime.utcnow())
    result = TransactionAggregator(store).aggregate(user_id, date_from=date_from, with_buckets=True)

    stats = PeriodStats(category_summary=result.buckets)
    for bucket in result.buckets.values():
        stats.income += bucket.income
        stats.expense += bucket.expense
        stats.fixed_expense += bucket.fixed_expense
        stats.variable_expense += bucket.variable_expense
    stats.balance = stats.income - stats.expense
    return stats
