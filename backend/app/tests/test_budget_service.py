"""
Tests for budget usage aggregation.
"""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
import pytest
from app.models.transaction import TransactionType
from app.schemas.budget import UsageLevel
from app.services.budget_service import (
    calculate_budget_usage, percent_of, summarize_budgets, usage_level
)


def make_budget(category="Dining", limit="100", currency="USD", month=10, year=2026):
    return SimpleNamespace(
        id=None, group_id=1, category=category, amount_limit=Decimal(limit),
        currency=currency, month=month, year=year
    )


def make_tx(kind, amount, category="Dining", currency="USD", converted_amount=None, converted_currency=None):
    return SimpleNamespace(
        type=kind, amount=Decimal(amount), category=category, currency=currency,
        converted_amount=Decimal(converted_amount) if converted_amount else None,
        converted_currency=converted_currency, date=date(2026, 10, 5), merchant="Shop"
    )


def expense(amount, **kwargs):
    return make_tx(TransactionType.EXPENSE, amount, **kwargs)


def income(amount, **kwargs):
    return make_tx(TransactionType.INCOME, amount, **kwargs)


def test_income_tops_up_effective_limit():
    usage = calculate_budget_usage(make_budget(limit="100"), [expense("40"), income("10")])
    assert usage.effective_limit == Decimal("110")
    assert usage.spent == Decimal("40")
    assert usage.remaining == Decimal("70")
    assert usage.percent_used == pytest.approx(36.36, abs=0.01)
    assert usage.level == UsageLevel.NOMINAL


def test_near_limit_is_critical():
    usage = calculate_budget_usage(make_budget(limit="50"), [expense("30"), expense("18")])
    assert usage.spent == Decimal("48")
    assert usage.remaining == Decimal("2")
    assert usage.percent_used == pytest.approx(96.0)
    assert usage.level == UsageLevel.CRITICAL


def test_remaining_never_negative():
    usage = calculate_budget_usage(make_budget(limit="50"), [expense("80")])
    assert usage.remaining == Decimal("0")
    assert usage.percent_used == pytest.approx(160.0)
    assert usage.level == UsageLevel.CRITICAL


def test_category_match_is_case_insensitive():
    usage = calculate_budget_usage(make_budget(category="dining"), [expense("25", category="Dining")])
    assert usage.spent == Decimal("25")


def test_unrelated_and_uncategorized_transactions_ignored():
    transactions = [
        expense("25", category="Groceries"),
        expense("30", category=None),
        income("500", category=None),
    ]
    usage = calculate_budget_usage(make_budget(), transactions)
    assert usage.spent == Decimal("0")
    assert usage.effective_limit == Decimal("100")
    assert usage.percent_used == 0.0


def test_native_amount_used_unless_converted_requested():
    transactions = [expense("100", currency="EUR", converted_amount="110", converted_currency="USD")]
    assert calculate_budget_usage(make_budget(), transactions).spent == Decimal("100")
    assert calculate_budget_usage(make_budget(), transactions, use_converted=True).spent == Decimal("110")


def test_converted_falls_back_to_amount():
    usage = calculate_budget_usage(make_budget(), [expense("12")], use_converted=True)
    assert usage.spent == Decimal("12")


@pytest.mark.parametrize("pct, level", [
    (91, UsageLevel.CRITICAL),
    (90.01, UsageLevel.CRITICAL),
    (90, UsageLevel.WARNING),
    (70.5, UsageLevel.WARNING),
    (70, UsageLevel.NOMINAL),
    (0, UsageLevel.NOMINAL),
])
def test_usage_level_boundaries(pct, level):
    assert usage_level(pct) == level


def test_percent_of_zero_limit():
    assert percent_of(Decimal("5"), Decimal("0")) == 0.0


def test_summary_totals_are_raw_sums_across_currencies():
    budgets = [
        make_budget(category="Dining", limit="100", currency="USD"),
        make_budget(category="Travel", limit="200", currency="EUR"),
    ]
    transactions = [
        expense("40", category="Dining"),
        income("10", category="dining"),
        expense("150", category="Travel", currency="EUR"),
    ]
    overview = summarize_budgets(budgets, transactions)

    assert [b.category for b in overview.budgets] == ["Dining", "Travel"]
    assert overview.total_limit == Decimal("310")
    assert overview.total_spent == Decimal("190")
    assert overview.total_remaining == Decimal("120")
    assert overview.total_percent_used == pytest.approx(61.29, abs=0.01)
    assert overview.total_level == UsageLevel.NOMINAL


def test_summary_of_nothing():
    overview = summarize_budgets([], [])
    assert overview.budgets == []
    assert overview.total_limit == Decimal("0")
    assert overview.total_spent == Decimal("0")
    assert overview.total_percent_used == 0.0


def test_summary_accepts_generators():
    overview = summarize_budgets([make_budget()], (t for t in [expense("10"), expense("5")]))
    assert overview.budgets[0].spent == Decimal("15")
