"""Statement service for managing uploaded bank statements"""

from typing import List, Sequence
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.models.statement import Statement
from app.services.base import BaseService
from app.services.file_service import file_service
from app.services.ai_service import ExtractionFile
from app.core.exceptions import DatabaseError, NotFoundError


class StatementService(BaseService[Statement]):
    """Service for managing bank statements"""

    def __init__(self):
        super().__init__(Statement)

    async def read_uploads(self, files: Sequence[UploadFile]) -> List[ExtractionFile]:
        """Validate an upload batch and read every file into memory"""
        file_service.validate_batch(files)
        return [
            ExtractionFile(
                content=await file_service.read_upload(f),
                mime_type=f.content_type,
                filename=f.filename,
            )
            for f in files
        ]

    def store_statements(
        self,
        db: Session,
        user_id: str,
        files: Sequence[ExtractionFile]
    ) -> List[Statement]:
        """Upload files to storage and create one statement record per file"""
        statements = []
        stored_ids = []
        try:
            for f in files:
                public_id, secure_url = file_service.upload(f.content, f.filename, user_id)
                stored_ids.append(public_id)
                statement = Statement(
                    user_id=user_id,
                    file_name=f.filename,
                    file_type=f.mime_type,
                    file_size=len(f.content),
                    storage_public_id=public_id,
                    storage_url=secure_url,
                )
                db.add(statement)
                statements.append(statement)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            for public_id in stored_ids:
                file_service.delete(public_id)
            self.log_error(e, "store_statements", user_id=user_id)
            raise DatabaseError("Failed to save statements")
        except Exception:
            db.rollback()
            for public_id in stored_ids:
                file_service.delete(public_id)
            raise

        for statement in statements:
            db.refresh(statement)

        self.log_operation("store_statements", user_id=user_id, count=len(statements))
        return statements

    def get_owned_statements(
        self,
        db: Session,
        user_id: str,
        statement_ids: Sequence[str]
    ) -> List[Statement]:
        """Statements among ``statement_ids`` that exist and belong to the user.

        Unknown or foreign ids are skipped; raises ``NotFoundError`` when none
        remain.
        """
        unique_ids = list(dict.fromkeys(statement_ids))
        statements = [
            s for s in (self.get(db, statement_id) for statement_id in unique_ids)
            if s is not None and s.user_id == user_id
        ]
        if not statements:
            raise NotFoundError("No valid statements found", details={"statement_ids": unique_ids})
        return statements

    async def load_files(self, statements: Sequence[Statement]) -> List[ExtractionFile]:
        """Fetch stored statement bytes for extraction"""
        return [
            ExtractionFile(
                content=await file_service.download(s.storage_public_id, s.storage_url),
                mime_type=s.file_type,
                filename=s.file_name,
            )
            for s in statements
        ]

    def delete_statement(self, db: Session, statement_id: str, user_id: str) -> None:
        """Delete statement record and its stored file"""
        statement = self.get_owned(db, statement_id, user_id, action="delete")
        public_id = statement.storage_public_id
        self.delete(db, statement)

        if public_id:
            file_service.delete(public_id)

        self.log_operation("delete_statement", statement_id=statement_id, user_id=user_id)


statement_service = StatementService()
