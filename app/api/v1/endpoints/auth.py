"""Authentication and profile endpoints"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.security import security_service
from app.api.deps import get_current_user
from app.schemas.user import AuthResponse, UserCreate, UserLogin, UserResponse, UserUpdate
from app.services.user_service import user_service
from app.models.user import User
from app.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_in: UserCreate,
    db: Session = Depends(get_db)
):
    """Register a new merchant account and return a token"""
    user = user_service.create_user(db, user_in)
    logger.info("User registered successfully", user_id=user.id)

    return AuthResponse(
        message="User registered successfully",
        token=security_service.create_access_token(subject=user.id),
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db)
):
    """Login user and return a token"""
    user = user_service.authenticate(db, credentials.email, credentials.password)
    logger.info("User logged in successfully", user_id=user.id)

    return AuthResponse(
        message="Login successful",
        token=security_service.create_access_token(subject=user.id),
        user=UserResponse.model_validate(user),
    )


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return {
        "user": {
            **UserResponse.model_validate(current_user).model_dump(by_alias=True),
            "createdAt": current_user.created_at,
        }
    }


@router.put("/profile")
def update_profile(
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update business name and phone"""
    user = user_service.update_profile(db, current_user, user_update)
    logger.info("User profile updated", user_id=user.id)

    return {
        "message": "Profile updated successfully",
        "user": UserResponse.model_validate(user).model_dump(by_alias=True),
    }
