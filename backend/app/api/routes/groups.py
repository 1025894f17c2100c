"""
Group management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List
from app.db.session import get_db
from app.models.user import User
from app.models.group import Group, GroupMember
from app.schemas.group import (
    GroupCreate, GroupJoin, GroupResponse, GroupWithRole,
    GroupDetailResponse, GroupMemberResponse
)
from app.api.dependencies import get_current_user
from app.services.group_service import create_group, get_membership, join_group_by_code

router = APIRouter(prefix="/groups", tags=["groups"])


def check_group_access(group_id: int, user_id: int, db: Session) -> Group:
    """
    Group the user is a member of.
    Unknown groups and groups the user cannot see are both 404.
    """
    group = db.query(Group).filter(Group.id == group_id).first()
    if not group or not get_membership(group_id, user_id, db):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found or access denied"
        )
    return group


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_new_group(
    group_data: GroupCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a shared group; the creator becomes its owner."""
    if not group_data.name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Group name is required"
        )
    return create_group(group_data.name, current_user.id, db)


@router.get("", response_model=List[GroupWithRole])
async def list_groups(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the caller's groups with their role and member count."""
    memberships = db.query(GroupMember).filter(
        GroupMember.user_id == current_user.id
    ).order_by(GroupMember.created_at, GroupMember.id).all()
    
    group_ids = [m.group_id for m in memberships]
    counts = dict(
        db.query(GroupMember.group_id, func.count(GroupMember.id)).filter(
            GroupMember.group_id.in_(group_ids)
        ).group_by(GroupMember.group_id).all()
    ) if group_ids else {}
    
    result = []
    for m in memberships:
        group = m.group
        result.append(GroupWithRole(
            id=group.id,
            name=group.name,
            invite_code=group.invite_code,
            created_by=group.created_by,
            is_personal=group.is_personal,
            created_at=group.created_at,
            role=m.role,
            member_count=counts.get(group.id, 0)
        ))
    return result


@router.post("/join", response_model=GroupResponse)
async def join_group(
    join_data: GroupJoin,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Join a group by its invite code."""
    try:
        return join_group_by_code(join_data.invite_code, current_user.id, db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


@router.get("/{group_id}", response_model=GroupDetailResponse)
async def get_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get group details with members."""
    group = check_group_access(group_id, current_user.id, db)
    
    members = db.query(GroupMember).filter(
        GroupMember.group_id == group_id
    ).order_by(GroupMember.created_at, GroupMember.id).all()
    
    return GroupDetailResponse(
        id=group.id,
        name=group.name,
        invite_code=group.invite_code,
        created_by=group.created_by,
        is_personal=group.is_personal,
        created_at=group.created_at,
        members=[
            GroupMemberResponse(
                user_id=m.user_id,
                email=m.user.email,
                display_name=m.user.display_name,
                role=m.role,
                joined_at=m.created_at
            )
            for m in members
        ]
    )
