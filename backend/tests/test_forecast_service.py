"""
Forecast generation against the SQL-backed transaction store.
"""
from datetime import datetime
from decimal import Decimal
from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from app.services.adjustment_service import ManualAdjustmentService
from app.services.errors import DependencyError, ValidationError
from app.services.forecast_service import ForecastService, _default_forecast_months
from app.services.transaction_store import SqlTransactionStore

NOW = datetime(2026, 10, 18, 12, 0)
USER = "forecast-user"


@pytest.fixture
def scenario_a(make_user, add_transaction):
    make_user(USER)
    add_transaction(USER, 1000, "expense", "Rent", datetime(2026, 1, 5), is_fixed=True)
    add_transaction(USER, 100, "expense", "Food", datetime(2026, 7, 10))
    add_transaction(USER, 150, "expense", "Food", datetime(2026, 8, 10))
    add_transaction(USER, 200, "expense", "Food", datetime(2026, 9, 10))


def _assert_additive(month) -> None:
    assert month.total_income == month.fixed_income + month.variable_income + month.income_adjustment
    assert month.total_expense == month.fixed_expense + month.variable_expense + month.expense_adjustment
    assert month.monthly_balance == month.total_income - month.total_expense


def test_scenario_a_fixed_rent_and_variable_food(db, scenario_a):
    forecast = ForecastService(db, USER, now=NOW).generate(1)

    assert len(forecast.forecast) == 1
    month = forecast.forecast[0]
    assert (month.year, month.month) == (2026, 11)
    assert month.date == datetime(2026, 11, 1)
    assert month.fixed_expense == Decimal("1000")
    assert month.variable_expense == Decimal("150")
    assert month.total_expense == Decimal("1150")
    assert month.total_income == Decimal("0")
    assert month.adjustment is None
    assert month.expense_breakdown == {"Rent": Decimal("1000.00"), "Food": Decimal("150.00")}
    _assert_additive(month)
    print("✓ scenario A")


def test_scenario_b_adjustment_reduces_target_month(db, scenario_a):
    adjustment, _ = ManualAdjustmentService(db, USER, now=NOW).upsert(
        month=10,
        year=2026,
        expense_adjustment=Decimal("-200"),
        description="Rent negotiated down",
    )

    forecast = ForecastService(db, USER, now=NOW).generate(2)
    november, december = forecast.forecast

    assert november.expense_adjustment == Decimal("-200")
    assert november.total_expense == Decimal("950")
    assert november.adjustment.description == "Rent negotiated down"
    assert november.adjustment.id == str(adjustment.id)
    assert december.total_expense == Decimal("1150")
    assert december.adjustment is None
    _assert_additive(november)
    print("✓ scenario B")


def test_scenario_c_no_transactions(db, make_user):
    make_user(USER)
    forecast = ForecastService(db, USER, now=NOW).generate(3)

    assert forecast.current_balance == Decimal("0")
    assert len(forecast.forecast) == 3
    for month in forecast.forecast:
        assert month.fixed_income == 0 and month.variable_income == 0
        assert month.fixed_expense == 0 and month.variable_expense == 0
        assert month.monthly_balance == 0
        assert month.accumulated_balance == 0
        assert month.income_breakdown == {}
        assert month.expense_breakdown == {}
    print("✓ scenario C")


def test_accumulated_balance_starts_from_current_month(db, make_user, add_transaction):
    make_user(USER)
    add_transaction(USER, 3000, "income", "Salary", datetime(2026, 3, 5), is_fixed=True)
    add_transaction(USER, 1200, "expense", "Rent", datetime(2026, 3, 1), is_fixed=True)
    add_transaction(USER, 500, "income", "Freelance", datetime(2026, 10, 2))
    add_transaction(USER, 120, "expense", "Food", datetime(2026, 10, 5))
    add_transaction(USER, 90, "expense", "Food", datetime(2026, 8, 5))

    forecast = ForecastService(db, USER, now=NOW).generate(6)
    months = forecast.forecast

    assert forecast.current_balance == Decimal("380")
    assert months[0].accumulated_balance == forecast.current_balance + months[0].monthly_balance
    for previous, current in zip(months, months[1:]):
        assert current.accumulated_balance == previous.accumulated_balance + current.monthly_balance
    for month in months:
        _assert_additive(month)
        assert month.variable_income >= 0
        assert month.variable_expense >= 0
    print("✓ accumulated balance")


def test_months_are_consecutive_across_year_end(db, make_user):
    make_user(USER)
    now = datetime(2026, 11, 15)
    ManualAdjustmentService(db, USER, now=now).upsert(
        month=0, year=2027, income_adjustment=Decimal("250"), description="Bonus",
    )

    months = ForecastService(db, USER, now=now).generate(3).forecast

    assert [(m.year, m.month) for m in months] == [(2026, 12), (2027, 1), (2027, 2)]
    assert months[0].income_adjustment == 0
    assert months[1].income_adjustment == Decimal("250")
    assert months[1].adjustment.description == "Bonus"
    assert months[2].income_adjustment == 0
    print("✓ year rollover")


@pytest.mark.parametrize("months", [0, 37, -1])
def test_out_of_range_months_rejected(db, make_user, months):
    make_user(USER)
    with pytest.raises(ValidationError):
        ForecastService(db, USER, now=NOW).generate(months)


@pytest.mark.parametrize("months", [1, 36])
def test_boundary_months_accepted(db, make_user, months):
    make_user(USER)
    forecast = ForecastService(db, USER, now=NOW).generate(months)
    assert len(forecast.forecast) == months
    assert forecast.months == months


def test_default_horizon_is_six_months(db, make_user):
    make_user(USER)
    assert len(ForecastService(db, USER, now=NOW).generate().forecast) == 6


def test_store_failure_surfaces_as_dependency_error():
    failing_session = mock.MagicMock()
    failing_session.query.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

    with pytest.raises(DependencyError):
        SqlTransactionStore(failing_session).query(USER)

    with pytest.raises(DependencyError):
        ForecastService(failing_session, USER, now=NOW).generate(3)
    print("✓ dependency failure")


@pytest.mark.parametrize("raw, expected", [("12", 12), ("0", 6), ("37", 6), ("six", 6)])
def test_configured_default_horizon_falls_back_when_out_of_range(monkeypatch, raw, expected):
    monkeypatch.setenv("FORECAST_DEFAULT_MONTHS", raw)
    assert _default_forecast_months() == expected
