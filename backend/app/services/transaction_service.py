"""
Transaction service for transaction-related business logic.
"""
from sqlalchemy.orm import Session
from decimal import Decimal
from typing import Optional, Tuple
import logging
from app.models.transaction import Transaction
from app.services.budget_service import find_budget_for_category
from app.services.fx_service import convert

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"type", "date", "amount", "currency", "merchant"}


def resolve_conversion(
    transaction: Transaction,
    db: Session
) -> Tuple[Optional[Decimal], Optional[str]]:
    """
    Converted amount and currency for a transaction recorded against a budget
    in another currency; (None, None) when no conversion applies or the rate
    lookup fails.
    """
    if not transaction.group_id or not transaction.category:
        return None, None
    
    budget = find_budget_for_category(
        transaction.group_id,
        transaction.category,
        transaction.date.month,
        transaction.date.year,
        db
    )
    if not budget or budget.currency.upper() == transaction.currency.upper():
        return None, None
    
    try:
        converted = convert(Decimal(transaction.amount), transaction.currency, budget.currency)
    except ValueError as e:
        # Saved without converted amount
        logger.warning(f"Conversion {transaction.currency} -> {budget.currency} failed: {e}")
        return None, None
    
    return converted, budget.currency.upper()


def apply_conversion(transaction: Transaction, db: Session) -> None:
    """Set converted_amount and converted_currency together."""
    converted_amount, converted_currency = resolve_conversion(transaction, db)
    transaction.converted_amount = converted_amount
    transaction.converted_currency = converted_currency


def create_transaction(user_id: int, data, db: Session) -> Transaction:
    """Create a transaction, converting it into its budget's currency when needed."""
    transaction = Transaction(
        user_id=user_id,
        group_id=data.group_id,
        type=data.type,
        date=data.date,
        amount=data.amount,
        currency=data.currency,
        merchant=data.merchant,
        category=data.category,
        notes=data.notes,
        receipt_url=data.receipt_url
    )
    apply_conversion(transaction, db)
    
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    
    return transaction


def update_transaction(transaction: Transaction, data, db: Session) -> Transaction:
    """Apply a partial update and recompute the conversion."""
    update_data = data.model_dump(exclude_unset=True)
    for field in ("merchant", "category", "notes"):
        if isinstance(update_data.get(field), str):
            update_data[field] = update_data[field].strip() or None

    for field, value in update_data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(transaction, field, value)
    
    apply_conversion(transaction, db)
    
    db.commit()
    db.refresh(transaction)
    
    return transaction
