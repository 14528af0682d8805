"""
SQLAlchemy models for the finance tracker backend.
Transactions and users are owned by the CRUD side of the app; the forecasting
engine only reads them. Manual adjustments are owned by the forecast API.
"""
import uuid
from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    Numeric,
    Text,
    Integer,
    ForeignKey,
    Index,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
from decimal import Decimal

from app.database import Base


TRANSACTION_TYPE_INCOME = "income"
TRANSACTION_TYPE_EXPENSE = "expense"


class Transaction(Base):
    """
    Income/expense record entered by the user.
    Amounts are stored unsigned; the direction comes from transaction_type.
    """
    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    transaction_type = Column(String(20), nullable=False)  # income, expense
    category = Column(String(255), nullable=False)  # free text, not normalized
    description = Column(Text, nullable=True)
    is_fixed = Column(Boolean, default=False, nullable=False)
    # Recurrence metadata
    is_recurrent = Column(Boolean, default=False, nullable=False)
    frequency = Column(String(20), nullable=True)  # monthly, weekly, yearly
    day_of_month = Column(Integer, nullable=True)
    day_of_week = Column(Integer, nullable=True)
    recurrence_month = Column(Integer, nullable=True)
    next_date = Column(DateTime, nullable=True)
    booked_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="transactions")

    # Indexes and constraints
    __table_args__ = (
        Index("idx_transactions_user_booked_at", "user_id", "booked_at"),
        Index("idx_transactions_user_fixed", "user_id", "is_fixed", "is_recurrent"),
    )


class ManualAdjustment(Base):
    """
    User-supplied delta for one forecasted month.
    month is zero-based (0 = January) to match the mobile client.
    """
    __tablename__ = "manual_adjustments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    income_adjustment = Column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    expense_adjustment = Column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    description = Column(Text, default="", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="manual_adjustments")

    # Indexes and constraints
    __table_args__ = (
        Index("idx_manual_adjustments_user", "user_id"),
        UniqueConstraint("user_id", "month", "year", name="manual_adjustments_user_month_year"),
    )


class User(Base):
    """
    Minimal user model for foreign key relationships.
    Registration and login are handled by the auth service.
    """
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    name = Column(Text, nullable=True)
    email = Column(Text, unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")
    manual_adjustments = relationship("ManualAdjustment", back_populates="user", cascade="all, delete-orphan")
