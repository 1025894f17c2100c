"""
Shared route dependencies for authentication.
"""
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


def resolve_user(credentials: Optional[HTTPAuthorizationCredentials], db: Session) -> User:
    """User behind a bearer credential; 401 when missing, invalid or inactive."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization"
        )
    
    payload = decode_access_token(credentials.credentials)
    user = None
    if payload and payload.get("user_id") is not None:
        user = db.query(User).filter(User.id == payload["user_id"]).first()
    
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Dependency for the authenticated user."""
    return resolve_user(credentials, db)
