"""
Pydantic schemas for Group entity.
"""
from pydantic import BaseModel, Field
from typing import List
from datetime import datetime
from app.models.group import GroupRole


class GroupCreate(BaseModel):
    """Schema for group creation."""
    name: str = Field(min_length=1, max_length=200)


class GroupJoin(BaseModel):
    """Schema for joining a group by invite code."""
    invite_code: str = Field(min_length=1, max_length=20)


class GroupResponse(BaseModel):
    """Schema for group response."""
    id: int
    name: str
    invite_code: str
    created_by: int
    is_personal: bool
    created_at: datetime
    
    class Config:
        from_attributes = True


class GroupWithRole(GroupResponse):
    """Group as seen from one member's group list."""
    role: GroupRole
    member_count: int


class GroupMemberResponse(BaseModel):
    """Schema for group member response."""
    user_id: int
    email: str
    display_name: str
    role: GroupRole
    joined_at: datetime


class GroupDetailResponse(GroupResponse):
    """Schema for detailed group response with members."""
    members: List[GroupMemberResponse] = []
