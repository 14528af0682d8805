from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from dataclasses import asdict
from typing import Optional

from app.database import get_db
from app.auth import get_user_id
from app.schemas import PeriodStatsResponse
from app.services.stats_service import get_period_stats
from app.services.transaction_store import SqlTransactionStore

router = APIRouter()


@router.get("/stats", response_model=PeriodStatsResponse)
def get_stats(
    period: Optional[str] = Query(None, description="week, month or year; omit for all history"),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Income, expense and fixed/variable split per category for a period"""
    stats = get_period_stats(SqlTransactionStore(db), user_id, period=period)
    return PeriodStatsResponse(
        period=period,
        income=stats.income,
        expense=stats.expense,
        fixed_expense=stats.fixed_expense,
        variable_expense=stats.variable_expense,
        balance=stats.balance,
        category_summary={name: asdict(bucket) for name, bucket in stats.category_summary.items()},
    )
