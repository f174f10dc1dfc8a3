"""User service for account operations"""

from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate
from app.services.base import BaseService
from app.core.security import security_service
from app.core.exceptions import AuthenticationError, DatabaseError, ValidationError


class UserService(BaseService[User]):
    """User service with authentication logic"""

    def __init__(self):
        super().__init__(User)

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    def create_user(self, db: Session, user_in: UserCreate) -> User:
        """Create new user with password hashing"""
        if self.get_by_email(db, user_in.email):
            raise ValidationError("Email already registered")

        user = User(
            email=user_in.email.lower(),
            hashed_password=security_service.create_password_hash(user_in.password),
            business_name=user_in.business_name or None,
            phone=user_in.phone or None,
        )
        try:
            db.add(user)
            db.commit()
            db.refresh(user)
        except SQLAlchemyError as e:
            db.rollback()
            self.log_error(e, "create_user", email=user_in.email)
            raise DatabaseError("Failed to register user")

        self.log_operation("create_user", user_id=user.id)
        return user

    def authenticate(self, db: Session, email: str, password: str) -> User:
        """Return the user for valid credentials, raise otherwise"""
        user = self.get_by_email(db, email)
        if not user or not security_service.verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid email or password")
        return user

    def update_profile(self, db: Session, user: User, user_in: UserUpdate) -> User:
        user.business_name = user_in.business_name or None
        user.phone = user_in.phone or None
        try:
            db.add(user)
            db.commit()
            db.refresh(user)
        except SQLAlchemyError as e:
            db.rollback()
            self.log_error(e, "update_profile", user_id=user.id)
            raise DatabaseError("Failed to update profile")

        self.log_operation("update_profile", user_id=user.id)
        return user


user_service = UserService()
