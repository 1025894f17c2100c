"""
Transaction model for income and expense records.
"""
from sqlalchemy import Column, String, Numeric, Date, ForeignKey, Integer, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class TransactionType(str, enum.Enum):
    """Direction of a money movement."""
    EXPENSE = "expense"
    INCOME = "income"


class Transaction(BaseModel):
    """A single money movement, optionally scoped to a group."""
    __tablename__ = "transactions"
    
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=True, index=True)
    type = Column(SQLEnum(TransactionType), nullable=False)
    date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    merchant = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)  # Links to a budget by name, case-insensitively
    notes = Column(Text, nullable=True)
    receipt_url = Column(String(500), nullable=True)
    converted_amount = Column(Numeric(15, 2), nullable=True)  # Amount in the budget's currency
    converted_currency = Column(String(3), nullable=True)
    
    # Relationships
    user = relationship("User", back_populates="transactions")
    group = relationship("Group", back_populates="transactions")
