"""
User profile routes.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.user import UserResponse, UserUpdate
from app.models.user import User
from app.api.dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def read_profile(current_user: User = Depends(get_current_user)):
    """Profile of the authenticated user."""
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_profile(
    profile: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change first and/or last name; omitted fields stay as they are."""
    changes = profile.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    
    if changes:
        logger.info(f"User {current_user.id} updated {', '.join(sorted(changes))}")
    return current_user
