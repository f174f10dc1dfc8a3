"""Report endpoints"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.api.deps import get_current_user
from app.schemas.report import (
    AddStatementsRequest, MonthlyHistoryEntry, MonthlyHistoryResponse,
    ReportCreate, ReportEnvelope, ReportListResponse, ReportSummary
)
from app.services.report_service import report_service
from app.models.user import User
from app.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/", response_model=ReportEnvelope, status_code=status.HTTP_201_CREATED)
def create_report(
    report_in: ReportCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Save an analysis as a new report"""
    report = report_service.create_report(
        db, current_user.id, report_in.statement_ids, report_in.analysis
    )
    logger.info("Report created", report_id=report.id, user_id=current_user.id)

    return ReportEnvelope(
        message="Report created successfully",
        report=report_service.to_response(report),
    )


@router.get("/", response_model=ReportListResponse)
def get_reports(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Summaries of the current user's reports, newest first"""
    reports = report_service.get_by_user(db, current_user.id)
    return ReportListResponse(
        reports=[ReportSummary.model_validate(r) for r in reports]
    )


@router.get("/latest", response_model=ReportEnvelope)
def get_latest_report(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    report = report_service.get_latest(db, current_user.id)
    return ReportEnvelope(report=report_service.to_response(report))


@router.get("/history/monthly", response_model=MonthlyHistoryResponse)
def get_monthly_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Every persisted monthly snapshot of the user, newest month first"""
    snapshots = report_service.monthly_history(db, current_user.id)
    return MonthlyHistoryResponse(
        monthly_history=[MonthlyHistoryEntry.model_validate(s) for s in snapshots]
    )


@router.get("/{report_id}", response_model=ReportEnvelope)
def get_report(
    report_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    report = report_service.get_owned(db, report_id, current_user.id)
    return ReportEnvelope(report=report_service.to_response(report))


@router.post("/{report_id}/add-statements", response_model=ReportEnvelope)
async def add_statements(
    report_id: str,
    request: AddStatementsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Analyze new statements and merge them into an existing report"""
    report = await report_service.add_statements(
        db, report_id, current_user.id, request.statement_ids
    )
    logger.info(
        "Report updated with new statements",
        report_id=report.id,
        user_id=current_user.id,
        statement_count=len(report.statement_ids)
    )

    return ReportEnvelope(
        message="Report updated with new statements",
        report=report_service.to_response(report),
    )
