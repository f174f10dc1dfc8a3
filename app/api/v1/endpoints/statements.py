"""Bank statement endpoints"""

from typing import List, Optional
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.api.deps import get_current_user, get_optional_user
from app.schemas.base import MessageResponse
from app.schemas.statement import (
    AnalyzeRequest, AnalyzeResponse, QuickAnalyzeResponse,
    StatementListResponse, StatementResponse, StatementUploadResponse
)
from app.services.ai_service import extraction_service
from app.services.statement_service import statement_service
from app.models.user import User
from app.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/upload", response_model=StatementUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_statements(
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Upload one or more statement files (PDF or images)"""
    extraction_files = await statement_service.read_uploads(files)
    statements = statement_service.store_statements(db, current_user.id, extraction_files)

    logger.info(
        "Statements uploaded successfully",
        user_id=current_user.id,
        count=len(statements)
    )

    return StatementUploadResponse(
        message="Files uploaded successfully",
        statements=[StatementResponse.model_validate(s) for s in statements],
    )


@router.get("/", response_model=StatementListResponse)
def get_statements(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List the current user's statements, newest first"""
    statements = statement_service.get_by_user(db, current_user.id)
    return StatementListResponse(
        statements=[StatementResponse.model_validate(s) for s in statements]
    )


@router.delete("/{statement_id}", response_model=MessageResponse)
def delete_statement(
    statement_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete statement and its stored file"""
    statement_service.delete_statement(db, statement_id, current_user.id)
    logger.info("Statement deleted successfully", statement_id=statement_id, user_id=current_user.id)
    return MessageResponse(message="Statement deleted successfully")


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_statements(
    request: AnalyzeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Run extraction over stored statements without saving a report"""
    statements = statement_service.get_owned_statements(db, current_user.id, request.statement_ids)
    files = await statement_service.load_files(statements)
    analysis = await extraction_service.extract(files)

    logger.info(
        "Statements analyzed",
        user_id=current_user.id,
        statement_count=len(statements),
        months=len(analysis.monthly_data)
    )

    return AnalyzeResponse(
        message="Analysis completed successfully",
        analysis=analysis,
        analyzed_statements=[s.id for s in statements],
    )


@router.post("/quick-analyze", response_model=QuickAnalyzeResponse)
async def quick_analyze(
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user)
):
    """Analyze uploaded files directly; files are kept only for signed-in users"""
    extraction_files = await statement_service.read_uploads(files)
    analysis = await extraction_service.extract(extraction_files)

    saved = current_user is not None
    if saved:
        statement_service.store_statements(db, current_user.id, extraction_files)

    logger.info(
        "Quick analysis completed",
        user_id=current_user.id if current_user else None,
        file_count=len(extraction_files),
        saved=saved
    )

    return QuickAnalyzeResponse(
        message="Analysis completed successfully",
        analysis=analysis,
        saved=saved,
    )
