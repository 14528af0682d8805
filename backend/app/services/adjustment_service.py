"""
Manual adjustments for forecasted months.

One adjustment per (user, month, year); posting again for the same month
replaces the stored values. Months are zero-based (0 = January).
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import ManualAdjustment
from app.services.errors import DependencyError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class ManualAdjustmentService:
    """Keyed storage of manual adjustments for a single user."""

    def __init__(self, db: Session, user_id: str, now: Optional[datetime] = None):
        self.db = db
        self.user_id = user_id
        self.now = now or datetime.utcnow()

    def list(self) -> List[ManualAdjustment]:
        """All adjustments of the user ordered by year, then month."""
        try:
            return (
                self.db.query(ManualAdjustment)
                .filter(ManualAdjustment.user_id == self.user_id)
                .order_by(ManualAdjustment.year, ManualAdjustment.month)
                .all()
            )
        except SQLAlchemyError as exc:
            logger.error(f"[ADJUSTMENT] Listing adjustments failed for user {self.user_id}: {exc}")
            raise DependencyError("Adjustment store is unavailable.") from exc

    def _validate(self, month: int, year: int) -> None:
        if month < 0 or month > 11:
            raise ValidationError(f"month must be between 0 and 11, got {month}.")
        if year < self.now.year:
            raise ValidationError(f"year must be {self.now.year} or later, got {year}.")

    def _find(self, month: int, year: int) -> Optional[ManualAdjustment]:
        return (
            self.db.query(ManualAdjustment)
            .filter(
                ManualAdjustment.user_id == self.user_id,
                ManualAdjustment.month == month,
                ManualAdjustment.year == year,
            )
            .first()
        )

    def upsert(
        self,
        month: int,
        year: int,
        income_adjustment: Decimal = Decimal("0"),
        expense_adjustment: Decimal = Decimal("0"),
        description: str = "",
    ) -> Tuple[ManualAdjustment, bool]:
        """
        Insert or replace the adjustment for (month, year).

        Returns:
            Tuple of (adjustment, created) where created is False on replacement
        """
        self._validate(month, year)
        values = {
            "income_adjustment": income_adjustment,
            "expense_adjustment": expense_adjustment,
            "description": description or "",
        }

        try:
            adjustment = self._find(month, year)
            created = adjustment is None
            if created:
                adjustment = ManualAdjustment(user_id=self.user_id, month=month, year=year, **values)
                self.db.add(adjustment)
            else:
                for field, value in values.items():
                    setattr(adjustment, field, value)

            try:
                self.db.commit()
            except IntegrityError:
                # Another request inserted the same month first; replace its values.
                self.db.rollback()
                adjustment = self._find(month, year)
                if adjustment is None:
                    raise
                created = False
                for field, value in values.items():
                    setattr(adjustment, field, value)
                self.db.commit()

            self.db.refresh(adjustment)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"[ADJUSTMENT] Upsert failed for user {self.user_id} ({year}-{month}): {exc}")
            raise DependencyError("Adjustment store is unavailable.") from exc

        logger.info(
            f"[ADJUSTMENT] {'Created' if created else 'Replaced'} adjustment {adjustment.id} "
            f"for user {self.user_id} month={month} year={year}"
        )
        return adjustment, created

    def delete(self, adjustment_id: UUID) -> None:
        """Delete one of the user's adjustments; foreign ids are reported as missing."""
        try:
            adjustment = (
                self.db.query(ManualAdjustment)
                .filter(
                    ManualAdjustment.id == adjustment_id,
                    ManualAdjustment.user_id == self.user_id,
                )
                .first()
            )
            if not adjustment:
                raise NotFoundError("Adjustment not found")
            self.db.delete(adjustment)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"[ADJUSTMENT] Delete of {adjustment_id} failed for user {self.user_id}: {exc}")
            raise DependencyError("Adjustment store is unavailable.") from exc

        logger.info(f"[ADJUSTMENT] Deleted adjustment {adjustment_id} for user {self.user_id}")
