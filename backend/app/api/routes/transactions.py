"""
Transaction management routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from decimal import Decimal
from app.core.utils import month_bounds
from app.db.session import get_db
from app.models.user import User
from app.models.transaction import Transaction, TransactionType
from app.schemas.transaction import (
    TransactionCreate, TransactionUpdate, TransactionResponse,
    TransactionSummary, DailyTransactions
)
from app.api.dependencies import get_current_user
from app.api.routes.groups import check_group_access
from app.services.budget_service import get_period_transactions
from app.services.group_service import get_membership
from app.services.transaction_service import create_transaction, update_transaction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])


def load_month_transactions(
    current_user: User,
    month: int,
    year: int,
    db: Session,
    group_id: Optional[int] = None,
    transaction_type: Optional[TransactionType] = None
) -> List[Transaction]:
    """Transactions of a month for a group, or the caller's own when no group is given."""
    if group_id is not None:
        check_group_access(group_id, current_user.id, db)
        return get_period_transactions(group_id, month, year, db, transaction_type)
    
    start_date, end_date = month_bounds(year, month)
    query = db.query(Transaction).filter(
        Transaction.user_id == current_user.id,
        Transaction.date >= start_date,
        Transaction.date <= end_date
    )
    if transaction_type is not None:
        query = query.filter(Transaction.type == transaction_type)
    return query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()


def get_visible_transaction(transaction_id: int, user_id: int, db: Session) -> Transaction:
    """Transaction owned by the user or shared through one of their groups."""
    transaction = db.query(Transaction).filter(Transaction.id == transaction_id).first()
    if transaction:
        if transaction.user_id == user_id:
            return transaction
        if transaction.group_id and get_membership(transaction.group_id, user_id, db):
            return transaction
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Transaction not found"
    )


def get_owned_transaction(transaction_id: int, user_id: int, db: Session) -> Transaction:
    """Transaction the user may modify."""
    transaction = get_visible_transaction(transaction_id, user_id, db)
    if transaction.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can modify this transaction"
        )
    return transaction


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def add_transaction(
    transaction_data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record an income or expense."""
    if transaction_data.group_id is not None:
        check_group_access(transaction_data.group_id, current_user.id, db)
    return create_transaction(current_user.id, transaction_data, db)


@router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    group_id: Optional[int] = None,
    type: Optional[TransactionType] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List a month's transactions, newest first."""
    return load_month_transactions(current_user, month, year, db, group_id, type)


@router.get("/summary", response_model=TransactionSummary)
async def get_transaction_summary(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    group_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Monthly income, expenses and net with transactions grouped by day."""
    transactions = load_month_transactions(current_user, month, year, db, group_id)
    
    total_income = Decimal(0)
    total_expenses = Decimal(0)
    by_date: Dict = {}
    for t in transactions:
        if t.type == TransactionType.EXPENSE:
            total_expenses += t.amount
        else:
            total_income += t.amount
        by_date.setdefault(t.date, []).append(t)
    
    days = [
        DailyTransactions(
            date=day,
            transactions=[TransactionResponse.model_validate(t) for t in by_date[day]]
        )
        for day in sorted(by_date, reverse=True)
    ]
    
    return TransactionSummary(
        month=month,
        year=year,
        total_income=total_income,
        total_expenses=total_expenses,
        net=total_income - total_expenses,
        transaction_count=len(transactions),
        days=days
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single transaction."""
    return get_visible_transaction(transaction_id, current_user.id, db)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
async def edit_transaction(
    transaction_id: int,
    transaction_data: TransactionUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a transaction and recompute its converted amount."""
    transaction = get_owned_transaction(transaction_id, current_user.id, db)
    if transaction_data.group_id is not None:
        check_group_access(transaction_data.group_id, current_user.id, db)
    return update_transaction(transaction, transaction_data, db)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a transaction."""
    transaction = get_owned_transaction(transaction_id, current_user.id, db)
    db.delete(transaction)
    db.commit()
    logger.info(f"Deleted transaction {transaction_id}")
