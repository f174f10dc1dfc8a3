"""User schemas"""

from typing import Optional
from pydantic import EmailStr, Field
from app.schemas.base import BaseSchema


class UserCreate(BaseSchema):
    """Registration payload"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    business_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


class UserLogin(BaseSchema):
    email: EmailStr
    password: str


class UserUpdate(BaseSchema):
    business_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


class UserResponse(BaseSchema):
    id: str
    email: str
    business_name: Optional[str] = None
    phone: Optional[str] = None


class AuthResponse(BaseSchema):
    """Token plus the authenticated user"""
    message: str
    token: str
    user: UserResponse
