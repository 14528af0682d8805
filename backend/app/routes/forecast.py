from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from app.database import get_db
from app.auth import get_user_id
from app.schemas import (
    ForecastResponse,
    ManualAdjustmentResponse,
    ManualAdjustmentUpsert,
)
from app.services.adjustment_service import ManualAdjustmentService
from app.services.forecast_service import DEFAULT_FORECAST_MONTHS, ForecastService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ForecastResponse)
def get_forecast(
    months: str = Query(str(DEFAULT_FORECAST_MONTHS), description="Horizon in months, 1-36"),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Project income, expenses and balance for the next `months` months (1-36)."""
    return ForecastService(db, user_id).generate(months)


@router.get("/adjustments", response_model=List[ManualAdjustmentResponse])
def list_adjustments(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """List manual adjustments ordered by year and month."""
    return ManualAdjustmentService(db, user_id).list()


@router.post("/adjustments", response_model=ManualAdjustmentResponse)
def upsert_adjustment(
    payload: ManualAdjustmentUpsert,
    response: Response,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Create the adjustment for a month, or replace the existing one."""
    adjustment, created = ManualAdjustmentService(db, user_id).upsert(
        month=payload.month,
        year=payload.year,
        income_adjustment=payload.income_adjustment,
        expense_adjustment=payload.expense_adjustment,
        description=payload.description,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return adjustment


@router.delete("/adjustments/{adjustment_id}", status_code=204)
def delete_adjustment(
    adjustment_id: UUID,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Delete one of the caller's adjustments."""
    ManualAdjustmentService(db, user_id).delete(adjustment_id)
    return Response(status_code=204)
