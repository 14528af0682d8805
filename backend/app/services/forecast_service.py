"""
Multi-month cash-flow forecast.

For each requested month the projection is:
    total_income  = fixed_income + variable_income + income_adjustment
    total_expense = fixed_expense + variable_expense + expense_adjustment
    monthly_balance = total_income - total_expense
and the accumulated balance starts from what the user has realized so far in the
current calendar month.

Usage:
    service = ForecastService(db, user_id)
    forecast = service.generate(months=6)
"""
import os
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from app.models import ManualAdjustment, TRANSACTION_TYPE_INCOME, TRANSACTION_TYPE_EXPENSE
from app.services.adjustment_service import ManualAdjustmentService
from app.services.errors import ValidationError
from app.services.monthly_average_estimator import MonthlyAverageEstimator, MonthlyAverages
from app.services.recurring_extractor import RecurringObligationExtractor
from app.services.transaction_aggregator import TransactionAggregator, sum_by_type
from app.services.transaction_store import SqlTransactionStore, TransactionStore

logger = logging.getLogger(__name__)


# Configuration
MIN_FORECAST_MONTHS = 1
MAX_FORECAST_MONTHS = 36
FALLBACK_FORECAST_MONTHS = 6
HISTORY_MONTHS = int(os.getenv("FORECAST_HISTORY_MONTHS", "3"))


def _default_forecast_months() -> int:
    raw_value = os.getenv("FORECAST_DEFAULT_MONTHS", str(FALLBACK_FORECAST_MONTHS))
    try:
        parsed = int(raw_value)
    except ValueError:
        parsed = None
    if parsed is None or not MIN_FORECAST_MONTHS <= parsed <= MAX_FORECAST_MONTHS:
        logger.warning(
            f"[FORECAST] Ignoring FORECAST_DEFAULT_MONTHS={raw_value!r}; "
            f"using {FALLBACK_FORECAST_MONTHS}"
        )
        return FALLBACK_FORECAST_MONTHS
    return parsed


DEFAULT_FORECAST_MONTHS = _default_forecast_months()

ZERO = Decimal("0")


@dataclass(frozen=True)
class AdjustmentRef:
    id: str
    description: str


@dataclass(frozen=True)
class ForecastMonth:
    date: datetime
    month: int  # 1-12
    year: int
    fixed_income: Decimal
    variable_income: Decimal
    income_adjustment: Decimal
    total_income: Decimal
    fixed_expense: Decimal
    variable_expense: Decimal
    expense_adjustment: Decimal
    total_expense: Decimal
    monthly_balance: Decimal
    accumulated_balance: Decimal
    income_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    expense_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    adjustment: Optional[AdjustmentRef] = None


@dataclass
class Forecast:
    months: int
    current_balance: Decimal
    averages: MonthlyAverages
    forecast: List[ForecastMonth]


def month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def validate_months(months) -> int:
    """Resolve the requested horizon to an int in [1, 36]."""
    if isinstance(months, bool) or not isinstance(months, (int, str)):
        raise ValidationError("months must be an integer.")
    try:
        resolved = int(months)
    except ValueError:
        raise ValidationError("months must be an integer.") from None
    if not MIN_FORECAST_MONTHS <= resolved <= MAX_FORECAST_MONTHS:
        raise ValidationError(
            f"months must be between {MIN_FORECAST_MONTHS} and {MAX_FORECAST_MONTHS}, got {resolved}."
        )
    return resolved


class ForecastService:
    """Builds forecasts for a single user from transactions and manual adjustments."""

    def __init__(
        self,
        db: Session,
        user_id: str,
        now: Optional[datetime] = None,
        store: Optional[TransactionStore] = None,
    ):
        self.db = db
        self.user_id = user_id
        self.now = now or datetime.utcnow()
        self.store = store or SqlTransactionStore(db)
        self.aggregator = TransactionAggregator(self.store)
        self.extractor = RecurringObligationExtractor(self.store)
        self.adjustments = ManualAdjustmentService(db, user_id, now=self.now)

    def history_start(self) -> datetime:
        return month_start(self.now) - relativedelta(months=HISTORY_MONTHS)

    def current_month_balance(self) -> Decimal:
        """Realized income minus expense since the 1st of the current month."""
        current = self.aggregator.aggregate(self.user_id, date_from=month_start(self.now))
        totals = sum_by_type(current.transactions)
        return totals["income"] - totals["expense"]

    def build_estimator(self) -> MonthlyAverageEstimator:
        window = self.aggregator.aggregate(self.user_id, date_from=self.history_start())
        baseline = self.extractor.extract(self.user_id)
        return MonthlyAverageEstimator(window.transactions, baseline)

    def generate(self, months=DEFAULT_FORECAST_MONTHS) -> Forecast:
        months = validate_months(months)

        estimator = self.build_estimator()
        averages = estimator.averages()
        current_balance = self.current_month_balance()
        adjustments: Dict[Tuple[int, int], ManualAdjustment] = {
            (adj.year, adj.month): adj for adj in self.adjustments.list()
        }

        # The same category snapshot is applied to every projected month.
        income_breakdown = estimator.category_breakdown(TRANSACTION_TYPE_INCOME)
        expense_breakdown = estimator.category_breakdown(TRANSACTION_TYPE_EXPENSE)

        logger.info(
            f"[FORECAST] user={self.user_id} months={months} "
            f"current_balance={current_balance} averages={averages}"
        )

        projected: List[ForecastMonth] = []
        balance = current_balance
        first_month = month_start(self.now)
        for offset in range(1, months + 1):
            forecast_date = first_month + relativedelta(months=offset)
            adjustment = adjustments.get((forecast_date.year, forecast_date.month - 1))
            income_adjustment = adjustment.income_adjustment if adjustment else ZERO
            expense_adjustment = adjustment.expense_adjustment if adjustment else ZERO

            total_income = averages.fixed_income + averages.variable_income + income_adjustment
            total_expense = averages.fixed_expense + averages.variable_expense + expense_adjustment
            monthly_balance = total_income - total_expense
            balance += monthly_balance

            projected.append(
                ForecastMonth(
                    date=forecast_date,
                    month=forecast_date.month,
                    year=forecast_date.year,
                    fixed_income=averages.fixed_income,
                    variable_income=averages.variable_income,
                    income_adjustment=income_adjustment,
                    total_income=total_income,
                    fixed_expense=averages.fixed_expense,
                    variable_expense=averages.variable_expense,
                    expense_adjustment=expense_adjustment,
                    total_expense=total_expense,
                    monthly_balance=monthly_balance,
                    accumulated_balance=balance,
                    income_breakdown=dict(income_breakdown),
                    expense_breakdown=dict(expense_breakdown),
                    adjustment=(
                        AdjustmentRef(id=str(adjustment.id), description=adjustment.description)
                        if adjustment
                        else None
                    ),
                )
            )

        return Forecast(
            months=months,
            current_balance=current_balance,
            averages=averages,
            forecast=projected,
        )
