"""Lead capture endpoints (no authentication)"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.schemas.base import MessageResponse
from app.schemas.lead import LeadCreate, LeadEnvelope, LeadResponse, LeadStatusUpdate
from app.services.lead_service import lead_service
from app.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/", response_model=LeadEnvelope, status_code=status.HTTP_201_CREATED)
def create_lead(
    lead_in: LeadCreate,
    response: Response,
    db: Session = Depends(get_db)
):
    """Capture an email; returning visitors get their existing lead back"""
    lead, is_returning = lead_service.capture(db, lead_in)

    if is_returning:
        response.status_code = status.HTTP_200_OK
        message = "Welcome back!"
    else:
        logger.info("Lead captured", lead_id=lead.id, source=lead.source)
        message = "Lead captured successfully"

    return LeadEnvelope(
        message=message,
        lead=LeadResponse.model_validate(lead),
        is_returning=is_returning,
    )


@router.get("/{lead_id}", response_model=LeadEnvelope)
def get_lead(lead_id: str, db: Session = Depends(get_db)):
    lead = lead_service.get_or_404(db, lead_id)
    return LeadEnvelope(lead=LeadResponse.model_validate(lead))


@router.post("/{lead_id}/analysis-completed", response_model=MessageResponse)
def mark_analysis_completed(lead_id: str, db: Session = Depends(get_db)):
    lead_service.mark_analysis_completed(db, lead_id)
    return MessageResponse(message="Lead updated successfully")


@router.patch("/{lead_id}/status", response_model=MessageResponse)
def update_lead_status(
    lead_id: str,
    status_update: LeadStatusUpdate,
    db: Session = Depends(get_db)
):
    lead_service.update_status(db, lead_id, status_update.status)
    logger.info("Lead status updated", lead_id=lead_id, status=status_update.status.value)
    return MessageResponse(message="Lead status updated successfully")
