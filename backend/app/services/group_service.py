"""
Group service for membership and invite-code logic.
"""
from sqlalchemy.orm import Session
from typing import Optional
import logging
import secrets
import string
from app.models.group import Group, GroupMember, GroupRole

logger = logging.getLogger(__name__)

INVITE_CODE_LENGTH = 6
INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
PERSONAL_GROUP_NAME = "Personal"


def generate_invite_code(db: Session) -> str:
    """Random 6-character code not yet used by any group."""
    while True:
        code = "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))
        if not db.query(Group).filter(Group.invite_code == code).first():
            return code


def create_group(name: str, owner_id: int, db: Session, is_personal: bool = False) -> Group:
    """Create a group and add its creator as owner."""
    group = Group(
        name=name.strip(),
        invite_code=generate_invite_code(db),
        created_by=owner_id,
        is_personal=is_personal
    )
    db.add(group)
    db.flush()
    
    db.add(GroupMember(group_id=group.id, user_id=owner_id, role=GroupRole.OWNER))
    db.commit()
    db.refresh(group)
    
    logger.info(f"Created group {group.id} for user {owner_id}")
    return group


def create_personal_group(user_id: int, db: Session) -> Group:
    """Private group every user starts with."""
    return create_group(PERSONAL_GROUP_NAME, user_id, db, is_personal=True)


def get_membership(group_id: int, user_id: int, db: Session) -> Optional[GroupMember]:
    """Membership row of a user in a group, if any."""
    return db.query(GroupMember).filter(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id
    ).first()


def join_group_by_code(invite_code: str, user_id: int, db: Session) -> Group:
    """
    Join the group owning invite_code as a member.
    Joining a group twice keeps the existing membership.
    
    Raises:
        ValueError: when no group has this code
    """
    code = invite_code.strip().upper()
    group = db.query(Group).filter(Group.invite_code == code).first()
    if not group:
        raise ValueError("Invalid invite code")
    
    if not get_membership(group.id, user_id, db):
        db.add(GroupMember(group_id=group.id, user_id=user_id, role=GroupRole.MEMBER))
        db.commit()
        logger.info(f"User {user_id} joined group {group.id}")
    
    return group
