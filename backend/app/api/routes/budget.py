"""
Budget management routes.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.user import User
from app.models.budget import GroupBudget
from app.schemas.budget import BudgetUpsert, BudgetResponse, BudgetOverview
from app.api.dependencies import get_current_user
from app.api.routes.groups import check_group_access
from app.services.budget_service import (
    get_budget_categories, get_period_budgets, get_period_transactions, summarize_budgets
)

router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.put("/{group_id}", response_model=BudgetResponse, status_code=status.HTTP_200_OK)
async def upsert_budget(
    group_id: int,
    budget_data: BudgetUpsert,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Set or replace a category budget for a month."""
    check_group_access(group_id, current_user.id, db)
    
    budget = db.query(GroupBudget).filter(
        GroupBudget.group_id == group_id,
        GroupBudget.category == budget_data.category,
        GroupBudget.month == budget_data.month,
        GroupBudget.year == budget_data.year
    ).first()
    
    if budget:
        budget.amount_limit = budget_data.amount_limit
        budget.currency = budget_data.currency
    else:
        budget = GroupBudget(group_id=group_id, **budget_data.model_dump())
        db.add(budget)
    
    db.commit()
    db.refresh(budget)
    
    return budget


@router.get("/{group_id}", response_model=BudgetOverview)
async def get_budget_overview(
    group_id: int,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Budgets of a month with spending, effective limits and totals."""
    check_group_access(group_id, current_user.id, db)
    
    budgets = get_period_budgets(group_id, month, year, db)
    transactions = get_period_transactions(group_id, month, year, db)
    
    return summarize_budgets(budgets, transactions)


@router.get("/{group_id}/categories", response_model=List[str])
async def list_budget_categories(
    group_id: int,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Budget names a transaction can be filed under."""
    check_group_access(group_id, current_user.id, db)
    return get_budget_categories(group_id, month, year, db)
