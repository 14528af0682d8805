from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.auth import get_user_id
from app.schemas import RecurringTransactionsResponse, TransactionResponse
from app.services.recurring_extractor import RecurringObligationExtractor
from app.services.transaction_store import SqlTransactionStore

router = APIRouter()


@router.get("", response_model=List[TransactionResponse])
def list_transactions(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """List the caller's transactions, newest first."""
    return SqlTransactionStore(db).query(user_id)


@router.get("/recurring", response_model=RecurringTransactionsResponse)
def list_recurring_transactions(
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Fixed or recurrent transactions with the baseline they contribute to the forecast."""
    return RecurringObligationExtractor(SqlTransactionStore(db)).extract(user_id)
