"""
Group models for personal and shared finance contexts.
"""
from sqlalchemy import Column, String, Boolean, Enum as SQLEnum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class GroupRole(str, enum.Enum):
    """Member role within a group."""
    OWNER = "owner"
    MEMBER = "member"


class Group(BaseModel):
    """Group scoping transactions and budgets."""
    __tablename__ = "groups"
    
    name = Column(String(200), nullable=False)
    invite_code = Column(String(6), unique=True, nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_personal = Column(Boolean, default=False, nullable=False)
    
    # Relationships
    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")
    transactions = relationship("Transaction", back_populates="group")
    budgets = relationship("GroupBudget", back_populates="group", cascade="all, delete-orphan")


class GroupMember(BaseModel):
    """Junction table for Group and User; created_at is the join time."""
    __tablename__ = "group_members"
    
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(SQLEnum(GroupRole), default=GroupRole.MEMBER, nullable=False)
    
    # Relationships
    group = relationship("Group", back_populates="members")
    user = relationship("User", back_populates="memberships")
    
    __table_args__ = (
        UniqueConstraint('group_id', 'user_id', name='uq_group_member'),
    )
