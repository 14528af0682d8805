from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict
from uuid import UUID


class CamelModel(BaseModel):
    """Serialized with camelCase keys for the mobile client; accepts both forms."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Transaction Schemas
class RecurrenceResponse(CamelModel):
    is_recurrent: bool
    frequency: Optional[str] = None
    day_of_month: Optional[int] = None
    day_of_week: Optional[int] = None
    month: Optional[int] = None
    next_date: Optional[datetime] = None


class TransactionResponse(CamelModel):
    id: UUID
    amount: float
    transaction_type: str  # income, expense
    category: str
    description: Optional[str] = None
    is_fixed: bool
    recurrence: RecurrenceResponse
    booked_at: datetime


class RecurringTransactionsResponse(CamelModel):
    fixed_income: float
    fixed_expense: float
    transactions: List[TransactionResponse]


# Analytics Schemas
class CategoryBucketResponse(CamelModel):
    category: str
    income: float
    expense: float
    fixed_expense: float
    variable_expense: float


class PeriodStatsResponse(CamelModel):
    period: Optional[str] = None
    income: float
    expense: float
    fixed_expense: float
    variable_expense: float
    balance: float
    category_summary: Dict[str, CategoryBucketResponse]


# Manual Adjustment Schemas
class ManualAdjustmentUpsert(CamelModel):
    month: int  # 0 = January
    year: int
    income_adjustment: Decimal = Decimal("0")
    expense_adjustment: Decimal = Decimal("0")
    description: str = ""


class ManualAdjustmentResponse(CamelModel):
    id: UUID
    month: int
    year: int
    income_adjustment: float
    expense_adjustment: float
    description: str
    created_at: datetime
    updated_at: datetime


# Forecast Schemas
class MonthlyAveragesResponse(CamelModel):
    fixed_income: float
    variable_income: float
    fixed_expense: float
    variable_expense: float


class ForecastAdjustmentRef(CamelModel):
    id: str
    description: str


class ForecastMonthResponse(CamelModel):
    date: datetime
    month: int  # 1-12
    year: int
    fixed_income: float
    variable_income: float
    income_adjustment: float
    total_income: float
    fixed_expense: float
    variable_expense: float
    expense_adjustment: float
    total_expense: float
    monthly_balance: float
    accumulated_balance: float
    income_breakdown: Dict[str, float]
    expense_breakdown: Dict[str, float]
    adjustment: Optional[ForecastAdjustmentRef] = None


class ForecastResponse(CamelModel):
    months: int
    current_balance: float
    averages: MonthlyAveragesResponse
    forecast: List[ForecastMonthResponse]
