"""
Read-only access to a user's transaction records.

The forecasting services depend on the TransactionStore interface only, so a
different backing store can be plugged in without touching the engine.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
import logging

from pydantic import BaseModel, ConfigDict
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import Transaction, TRANSACTION_TYPE_INCOME, TRANSACTION_TYPE_EXPENSE
from app.services.errors import DependencyError

logger = logging.getLogger(__name__)


class RecurrenceInfo(BaseModel):
    """Recurrence metadata attached to a transaction."""
    is_recurrent: bool = False
    frequency: Optional[str] = None  # monthly, weekly, yearly
    day_of_month: Optional[int] = None
    day_of_week: Optional[int] = None
    month: Optional[int] = None
    next_date: Optional[datetime] = None


class TransactionRecord(BaseModel):
    """Canonical transaction view consumed by the forecasting engine."""
    model_config = ConfigDict(frozen=True)

    id: UUID
    user_id: str
    amount: Decimal
    transaction_type: str  # income, expense
    category: str
    description: Optional[str] = None
    is_fixed: bool = False
    recurrence: RecurrenceInfo = RecurrenceInfo()
    booked_at: datetime

    @property
    def is_income(self) -> bool:
        return self.transaction_type == TRANSACTION_TYPE_INCOME

    @property
    def is_expense(self) -> bool:
        return self.transaction_type == TRANSACTION_TYPE_EXPENSE

    @property
    def is_recurring_obligation(self) -> bool:
        return self.is_fixed or self.recurrence.is_recurrent

    @classmethod
    def from_model(cls, row: Transaction) -> "TransactionRecord":
        return cls(
            id=row.id,
            user_id=row.user_id,
            amount=row.amount if row.amount is not None else Decimal("0"),
            transaction_type=row.transaction_type,
            category=row.category,
            description=row.description,
            is_fixed=bool(row.is_fixed),
            recurrence=RecurrenceInfo(
                is_recurrent=bool(row.is_recurrent),
                frequency=row.frequency,
                day_of_month=row.day_of_month,
                day_of_week=row.day_of_week,
                month=row.recurrence_month,
                next_date=row.next_date,
            ),
            booked_at=row.booked_at,
        )


class TransactionStore(ABC):
    """Abstract source of transaction records."""

    @abstractmethod
    def query(
        self,
        user_id: str,
        date_from: Optional[datetime] = None,
        recurring_only: bool = False,
    ) -> List[TransactionRecord]:
        """
        Fetch a user's transactions, newest first.

        Args:
            user_id: Owner of the transactions
            date_from: Optional inclusive lower bound on booked_at
            recurring_only: Only return fixed or recurrent transactions
        """
        pass


class SqlTransactionStore(TransactionStore):
    """TransactionStore backed by the transactions table."""

    def __init__(self, db: Session):
        self.db = db

    def query(
        self,
        user_id: str,
        date_from: Optional[datetime] = None,
        recurring_only: bool = False,
    ) -> List[TransactionRecord]:
        try:
            query = self.db.query(Transaction).filter(Transaction.user_id == user_id)
            if date_from is not None:
                query = query.filter(Transaction.booked_at >= date_from)
            if recurring_only:
                query = query.filter(
                    or_(Transaction.is_fixed == True, Transaction.is_recurrent == True)  # noqa: E712
                )
            rows = query.order_by(Transaction.booked_at.desc()).all()
        except SQLAlchemyError as exc:
            logger.error(f"[STORE] Transaction query failed for user {user_id}: {exc}")
            raise DependencyError("Transaction store is unavailable.") from exc

        return [TransactionRecord.from_model(row) for row in rows]
