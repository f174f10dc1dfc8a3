"""Base service class with common functionality"""

from typing import TypeVar, Generic, Optional, List, Type
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.logging import LoggerMixin
from app.core.exceptions import AuthorizationError, DatabaseError, NotFoundError

ModelType = TypeVar("ModelType")


class BaseService(Generic[ModelType], LoggerMixin):
    """Lookup and delete helpers shared by the model services"""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: str) -> Optional[ModelType]:
        """Get single record by ID"""
        try:
            return db.get(self.model, id)
        except SQLAlchemyError as e:
            self.log_error(e, "get_by_id", id=id)
            raise DatabaseError(f"Failed to get {self.model.__name__} by ID")

    def get_owned(self, db: Session, id: str, user_id: str, action: str = "view") -> ModelType:
        """Get a record that must exist and belong to ``user_id``"""
        obj = self.get(db, id)
        if obj is None:
            raise NotFoundError(f"{self.model.__name__} not found", details={"id": id})
        if obj.user_id != user_id:
            raise AuthorizationError(
                f"Not authorized to {action} this {self.model.__name__.lower()}",
                details={"id": id},
            )
        return obj

    def get_by_user(self, db: Session, user_id: str) -> List[ModelType]:
        """All records of a user, newest first"""
        try:
            return (
                db.query(self.model)
                .filter(self.model.user_id == user_id)
                .order_by(self.model.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.log_error(e, "get_by_user", user_id=user_id)
            raise DatabaseError(f"Failed to get {self.model.__name__} records")

    def delete(self, db: Session, obj: ModelType) -> None:
        """Delete record"""
        try:
            db.delete(obj)
            db.commit()
            self.log_operation("delete", model=self.model.__name__, id=obj.id)
        except SQLAlchemyError as e:
            db.rollback()
            self.log_error(e, "delete", model=self.model.__name__, id=obj.id)
            raise DatabaseError(f"Failed to delete {self.model.__name__}")
