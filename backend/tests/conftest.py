"""
Shared fixtures. Points the app at an in-memory SQLite database before any
app module is imported.
"""
import os
from datetime import datetime
from decimal import Decimal


os.environ["DATABASE_URL"] = os.getenv("TEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("INTERNAL_AUTH_SECRET", "test-internal-auth-secret")

import pytest  # noqa: E402

from app.database import Base, SessionLocal, engine  # noqa: E402
from app.models import Transaction, User  # noqa: E402


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    def _make_user(user_id: str) -> User:
        user = User(id=user_id, email=f"{user_id}@example.com", name=user_id)
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def add_transaction(db):
    def _add_transaction(
        user_id: str,
        amount,
        transaction_type: str,
        category: str,
        booked_at: datetime,
        is_fixed: bool = False,
        is_recurrent: bool = False,
        frequency: str | None = None,
    ) -> Transaction:
        tx = Transaction(
            user_id=user_id,
            amount=Decimal(str(amount)),
            transaction_type=transaction_type,
            category=category,
            is_fixed=is_fixed,
            is_recurrent=is_recurrent,
            frequency=frequency,
            booked_at=booked_at,
        )
        db.add(tx)
        db.commit()
        return tx

    return _add_transaction
