"""
Pydantic schemas for Transaction entity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date as date_type, datetime
from decimal import Decimal
from app.models.transaction import TransactionType


class TransactionBase(BaseModel):
    """Base transaction schema."""
    type: TransactionType
    date: date_type
    amount: Decimal = Field(gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    merchant: str = Field(min_length=1, max_length=255)
    category: Optional[str] = None
    notes: Optional[str] = None
    receipt_url: Optional[str] = None
    
    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()
    
    @field_validator("merchant", "category", "notes", mode="before")
    @classmethod
    def strip_text(cls, v):
        """Trim text fields; blank optional fields become None."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class TransactionCreate(TransactionBase):
    """Schema for transaction creation."""
    group_id: Optional[int] = None


class TransactionUpdate(BaseModel):
    """Schema for transaction update."""
    type: Optional[TransactionType] = None
    date: Optional[date_type] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    merchant: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[str] = None
    notes: Optional[str] = None
    receipt_url: Optional[str] = None
    group_id: Optional[int] = None
    
    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class TransactionResponse(TransactionBase):
    """Schema for transaction response."""
    id: int
    user_id: int
    group_id: Optional[int] = None
    converted_amount: Optional[Decimal] = None
    converted_currency: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class DailyTransactions(BaseModel):
    """Transactions of one day in a monthly listing."""
    date: date_type
    transactions: List[TransactionResponse] = []


class TransactionSummary(BaseModel):
    """Monthly income/expense summary."""
    month: int
    year: int
    total_income: Decimal
    total_expenses: Decimal
    net: Decimal
    transaction_count: int
    days: List[DailyTransactions] = []


class CalendarDay(BaseModel):
    """Per-day totals for the month calendar."""
    date: date_type
    income_total: Decimal
    expense_total: Decimal
    transaction_count: int
