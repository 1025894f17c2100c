"""
Pydantic schemas for Budget entity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import enum


class UsageLevel(str, enum.Enum):
    """Urgency of a budget's usage percentage."""
    NOMINAL = "nominal"
    WARNING = "warning"
    CRITICAL = "critical"


class BudgetBase(BaseModel):
    """Base budget schema."""
    category: str = Field(min_length=1, max_length=100)
    amount_limit: Decimal = Field(gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1970, le=9999)
    
    @field_validator("category")
    @classmethod
    def strip_category(cls, v: str) -> str:
        return v.strip()
    
    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class BudgetUpsert(BudgetBase):
    """Schema for creating or replacing a budget on (group, category, month, year)."""
    pass


class BudgetResponse(BudgetBase):
    """Schema for budget response."""
    id: int
    group_id: int
    created_at: datetime
    
    class Config:
        from_attributes = True


class BudgetWithUsage(BudgetBase):
    """Budget annotated with spending for its period."""
    id: Optional[int] = None
    group_id: Optional[int] = None
    spent: Decimal
    effective_limit: Decimal  # amount_limit plus income recorded against the category
    remaining: Decimal
    percent_used: float
    level: UsageLevel


class BudgetOverview(BaseModel):
    """Usage of every budget in a period plus raw totals across currencies."""
    budgets: List[BudgetWithUsage] = []
    total_limit: Decimal = Decimal(0)
    total_spent: Decimal = Decimal(0)
    total_remaining: Decimal = Decimal(0)
    total_percent_used: float = 0.0
    total_level: UsageLevel = UsageLevel.NOMINAL
