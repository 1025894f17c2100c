"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime


def _clean_name(v: Optional[str]) -> Optional[str]:
    if isinstance(v, str):
        return v.strip() or None
    return v


class UserBase(BaseModel):
    """Base user schema."""
    email: EmailStr
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    
    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def clean_names(cls, v):
        return _clean_name(v)


class UserCreate(UserBase):
    """Sign-up payload; the email becomes the login identifier."""
    password: str = Field(min_length=6, max_length=128)


class UserUpdate(BaseModel):
    """Profile fields a user may change. Blank names are cleared."""
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    
    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def clean_names(cls, v):
        return _clean_name(v)


class UserResponse(UserBase):
    """Profile as returned to its owner."""
    id: int
    display_name: str
    is_active: bool
    created_at: datetime
    
    class Config:
        from_attributes = True


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    """Bearer token issued at login."""
    access_token: str
    token_type: str = "bearer"
