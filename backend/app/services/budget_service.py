"""
Budget aggregation: usage of monthly category budgets.

Aggregation functions are pure and operate on already-loaded budgets and
transactions (ORM rows or any objects exposing the same attributes), both
already scoped to one group and one month.
"""
from sqlalchemy.orm import Session
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence
from app.core.utils import month_bounds
from app.models.budget import GroupBudget
from app.models.transaction import Transaction, TransactionType
from app.schemas.budget import BudgetOverview, BudgetWithUsage, UsageLevel

CRITICAL_THRESHOLD = 90
WARNING_THRESHOLD = 70


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def usage_level(percent_used: float) -> UsageLevel:
    """
    Classify a usage percentage.
    Both thresholds are exclusive: 90 is still a warning and 70 is nominal.
    """
    if percent_used > CRITICAL_THRESHOLD:
        return UsageLevel.CRITICAL
    if percent_used > WARNING_THRESHOLD:
        return UsageLevel.WARNING
    return UsageLevel.NOMINAL


def percent_of(spent: Decimal, limit: Decimal) -> float:
    """Spent as a percentage of limit; 0 when the limit is not positive."""
    if limit > 0:
        return float(spent / limit * 100)
    return 0.0


def transaction_value(transaction, use_converted: bool = False) -> Decimal:
    """Native amount, or the converted amount when requested and present."""
    if use_converted and transaction.converted_amount is not None:
        return _to_decimal(transaction.converted_amount)
    return _to_decimal(transaction.amount)


def matches_category(transaction, category: str) -> bool:
    """Case-insensitive category match; uncategorized transactions never match."""
    return bool(transaction.category) and transaction.category.lower() == category.lower()


def calculate_budget_usage(
    budget,
    transactions: Iterable,
    use_converted: bool = False
) -> BudgetWithUsage:
    """
    Annotate one budget with its spending.

    Expenses in the category count as spent. Income in the category raises
    the effective limit instead of offsetting spend.

    Args:
        budget: Budget definition (category, amount_limit, currency, month, year)
        transactions: Transactions of the budget's group and month
        use_converted: Sum converted_amount where present instead of amount

    Returns:
        BudgetWithUsage with spent, effective_limit, remaining and percent_used
    """
    expenses = Decimal(0)
    income = Decimal(0)
    for t in transactions:
        if not matches_category(t, budget.category):
            continue
        if t.type == TransactionType.EXPENSE:
            expenses += transaction_value(t, use_converted)
        elif t.type == TransactionType.INCOME:
            income += transaction_value(t, use_converted)

    effective_limit = _to_decimal(budget.amount_limit) + income
    spent = expenses
    pct = percent_of(spent, effective_limit)

    return BudgetWithUsage(
        id=getattr(budget, "id", None),
        group_id=getattr(budget, "group_id", None),
        category=budget.category,
        amount_limit=_to_decimal(budget.amount_limit),
        currency=budget.currency,
        month=budget.month,
        year=budget.year,
        spent=spent,
        effective_limit=effective_limit,
        remaining=max(Decimal(0), effective_limit - spent),
        percent_used=pct,
        level=usage_level(pct)
    )


def summarize_budgets(
    budgets: Sequence,
    transactions: Sequence,
    use_converted: bool = False
) -> BudgetOverview:
    """
    Usage for every budget of a period plus overall totals.

    Totals are raw sums of effective limits and spending across budgets,
    with no currency conversion between them.
    """
    transactions = list(transactions)
    items = [calculate_budget_usage(b, transactions, use_converted) for b in budgets]

    total_limit = sum((b.effective_limit for b in items), Decimal(0))
    total_spent = sum((b.spent for b in items), Decimal(0))
    total_pct = percent_of(total_spent, total_limit)

    return BudgetOverview(
        budgets=items,
        total_limit=total_limit,
        total_spent=total_spent,
        total_remaining=max(Decimal(0), total_limit - total_spent),
        total_percent_used=total_pct,
        total_level=usage_level(total_pct)
    )


def get_period_budgets(group_id: int, month: int, year: int, db: Session) -> List[GroupBudget]:
    """Budgets of a group for one month, ordered by category."""
    return db.query(GroupBudget).filter(
        GroupBudget.group_id == group_id,
        GroupBudget.month == month,
        GroupBudget.year == year
    ).order_by(GroupBudget.category).all()


def get_period_transactions(
    group_id: int,
    month: int,
    year: int,
    db: Session,
    transaction_type: Optional[TransactionType] = None
) -> List[Transaction]:
    """Transactions of a group within one month, newest first."""
    start_date, end_date = month_bounds(year, month)
    query = db.query(Transaction).filter(
        Transaction.group_id == group_id,
        Transaction.date >= start_date,
        Transaction.date <= end_date
    )
    if transaction_type is not None:
        query = query.filter(Transaction.type == transaction_type)
    return query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()


def find_budget_for_category(
    group_id: int,
    category: str,
    month: int,
    year: int,
    db: Session
) -> Optional[GroupBudget]:
    """Budget of a group and month whose name matches category case-insensitively."""
    for budget in get_period_budgets(group_id, month, year, db):
        if budget.category.lower() == category.lower():
            return budget
    return None


def get_budget_categories(group_id: int, month: int, year: int, db: Session) -> List[str]:
    """Distinct budget names of a period, in category order."""
    seen = []
    for budget in get_period_budgets(group_id, month, year, db):
        if budget.category not in seen:
            seen.append(budget.category)
    return seen
