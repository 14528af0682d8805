"""
Fixed/recurring baseline extraction.

The baseline is the plain sum of every fixed or recurrent transaction in the
user's whole history. Each recurring obligation is expected to be stored once,
with its recorded amount being the expected per-period amount; the sums are not
normalized by frequency.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import List

from app.services.transaction_aggregator import sum_by_type
from app.services.transaction_store import TransactionRecord, TransactionStore


@dataclass
class FixedBaseline:
    transactions: List[TransactionRecord]
    fixed_income: Decimal
    fixed_expense: Decimal


class RecurringObligationExtractor:
    def __init__(self, store: TransactionStore):
        self.store = store

    def extract(self, user_id: str) -> FixedBaseline:
        transactions = self.store.query(user_id, recurring_only=True)
        totals = sum_by_type(transactions)
        return FixedBaseline(
            transactions=transactions,
            fixed_income=totals["income"],
            fixed_expense=totals["expense"],
        )
