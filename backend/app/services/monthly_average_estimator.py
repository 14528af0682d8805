"""
Monthly average estimation for the cash-flow forecast.

Works on two inputs:
    - the trailing-window transactions (every record booked since the window start)
    - the fixed baseline from RecurringObligationExtractor (whole history)

For each type the window is grouped by calendar month, the monthly totals are
averaged over the number of months that actually have data (at least one), and
the fixed/recurring share seen in the window is netted out so that only the
variable part remains. Fixed amounts come from the baseline instead.

Usage:
    estimator = MonthlyAverageEstimator(window_transactions, baseline)
    averages = estimator.averages()
    expense_breakdown = estimator.category_breakdown("expense")
"""
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Tuple

from app.models import TRANSACTION_TYPE_INCOME, TRANSACTION_TYPE_EXPENSE
from app.services.recurring_extractor import FixedBaseline
from app.services.transaction_store import TransactionRecord

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class MonthlyAverages:
    fixed_income: Decimal = ZERO
    variable_income: Decimal = ZERO
    fixed_expense: Decimal = ZERO
    variable_expense: Decimal = ZERO


class MonthlyAverageEstimator:
    def __init__(self, window_transactions: List[TransactionRecord], baseline: FixedBaseline):
        self.window_transactions = window_transactions
        self.baseline = baseline

    def _monthly_totals(self, transaction_type: str) -> Tuple[Dict[Tuple[int, int], Decimal], Decimal]:
        """Window totals keyed by (year, month), plus the fixed/recurring part of the window."""
        totals: Dict[Tuple[int, int], Decimal] = defaultdict(lambda: ZERO)
        recurring_total = ZERO
        for tx in self.window_transactions:
            if tx.transaction_type != transaction_type:
                continue
            totals[(tx.booked_at.year, tx.booked_at.month)] += tx.amount
            if tx.is_recurring_obligation:
                recurring_total += tx.amount
        return totals, recurring_total

    def _variable_average(self, transaction_type: str) -> Decimal:
        totals, recurring_total = self._monthly_totals(transaction_type)
        # Guard against empty history
        observed_months = max(1, len(totals))
        average_total = sum(totals.values(), ZERO) / observed_months
        average_recurring = recurring_total / observed_months
        return max(ZERO, to_cents(average_total - average_recurring))

    def averages(self) -> MonthlyAverages:
        return MonthlyAverages(
            fixed_income=to_cents(self.baseline.fixed_income),
            variable_income=self._variable_average(TRANSACTION_TYPE_INCOME),
            fixed_expense=to_cents(self.baseline.fixed_expense),
            variable_expense=self._variable_average(TRANSACTION_TYPE_EXPENSE),
        )

    def category_breakdown(self, transaction_type: str) -> Dict[str, Decimal]:
        """
        Blended per-category estimate used for the "top categories" display.

        Recurring amounts are added as recorded. Variable transactions contribute
        the average amount per transaction of their category (total divided by the
        number of transactions, not months). The entries are not reconciled with
        the month's total, so shares computed against totalIncome/totalExpense
        need not add up to 100%.
        """
        breakdown: Dict[str, Decimal] = defaultdict(lambda: ZERO)

        for tx in self.baseline.transactions:
            if tx.transaction_type == transaction_type:
                breakdown[tx.category] += tx.amount

        variable_totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        variable_counts: Dict[str, int] = defaultdict(int)
        for tx in self.window_transactions:
            if tx.transaction_type != transaction_type or tx.is_recurring_obligation:
                continue
            variable_totals[tx.category] += tx.amount
            variable_counts[tx.category] += 1

        for category, total in variable_totals.items():
            breakdown[category] += total / variable_counts[category]

        return {category: to_cents(amount) for category, amount in breakdown.items()}
