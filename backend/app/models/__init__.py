"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User
from app.models.group import Group, GroupMember, GroupRole
from app.models.transaction import Transaction, TransactionType
from app.models.budget import GroupBudget

__all__ = [
    "User",
    "Group",
    "GroupMember",
    "GroupRole",
    "Transaction",
    "TransactionType",
    "GroupBudget",
]
