"""
Calendar routes for monthly views.
"""
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from typing import Dict, List
from decimal import Decimal
from app.db.session import get_db
from app.models.user import User
from app.models.transaction import TransactionType
from app.schemas.transaction import CalendarDay
from app.api.dependencies import get_current_user
from app.api.routes.groups import check_group_access
from app.services.budget_service import get_period_transactions

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("/{group_id}/{year}/{month}", response_model=List[CalendarDay])
async def get_month_days(
    group_id: int,
    year: int = Path(..., ge=1970, le=9999),
    month: int = Path(..., ge=1, le=12),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Income and expense totals for every day of the month that has transactions."""
    check_group_access(group_id, current_user.id, db)
    
    days: Dict = {}
    for t in get_period_transactions(group_id, month, year, db):
        day = days.setdefault(t.date, {
            "income_total": Decimal(0),
            "expense_total": Decimal(0),
            "transaction_count": 0
        })
        if t.type == TransactionType.EXPENSE:
            day["expense_total"] += t.amount
        else:
            day["income_total"] += t.amount
        day["transaction_count"] += 1
    
    return [CalendarDay(date=d, **totals) for d, totals in sorted(days.items())]
