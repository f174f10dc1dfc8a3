"""API dependencies for authentication and database access"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.security import security_service
from app.core.exceptions import unauthorized_exception
from app.models.user import User
from app.services.user_service import user_service

# Security schemes
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _user_from_token(db: Session, token: str) -> Optional[User]:
    user_id = security_service.verify_token(token)
    if not user_id:
        return None
    return user_service.get(db, user_id)


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    """Get current authenticated user"""
    user = _user_from_token(db, credentials.credentials)
    if not user:
        raise unauthorized_exception("Invalid or expired token")
    return user


def get_optional_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> Optional[User]:
    """Authenticated user when a valid bearer token is present, else None"""
    if credentials is None:
        return None
    return _user_from_token(db, credentials.credentials)
