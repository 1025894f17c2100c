"""
Budget model for monthly per-category group limits.
"""
from sqlalchemy import Column, String, Numeric, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class GroupBudget(BaseModel):
    """Spending limit per group, category and month."""
    __tablename__ = "group_budgets"
    
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    category = Column(String(100), nullable=False)
    amount_limit = Column(Numeric(15, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    
    # Relationships
    group = relationship("Group", back_populates="budgets")
    
    # Upsert key: one budget per category per month per group
    __table_args__ = (
        UniqueConstraint('group_id', 'category', 'month', 'year', name='uq_group_category_period'),
    )
