"""Lead capture service"""

from typing import Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.models.lead import Lead, LeadStatus
from app.schemas.lead import LeadCreate
from app.services.base import BaseService
from app.core.exceptions import DatabaseError, NotFoundError


class LeadService(BaseService[Lead]):

    def __init__(self):
        super().__init__(Lead)

    def get_by_email(self, db: Session, email: str) -> Optional[Lead]:
        return db.query(Lead).filter(Lead.email == email.lower()).first()

    def get_or_404(self, db: Session, lead_id: str) -> Lead:
        lead = self.get(db, lead_id)
        if lead is None:
            raise NotFoundError("Lead not found", details={"id": lead_id})
        return lead

    def capture(self, db: Session, lead_in: LeadCreate) -> Tuple[Lead, bool]:
        """Create a lead, or return the existing one for a known email.

        Returns ``(lead, is_returning)``.
        """
        existing = self.get_by_email(db, lead_in.email)
        if existing:
            return existing, True

        lead = Lead(
            email=lead_in.email.lower(),
            business_name=lead_in.business_name or None,
            phone=lead_in.phone or None,
            source=lead_in.source or "organic",
        )
        self._save(db, lead, "capture_lead")
        return lead, False

    def mark_analysis_completed(self, db: Session, lead_id: str) -> Lead:
        lead = self.get_or_404(db, lead_id)
        lead.analysis_completed = True
        self._save(db, lead, "mark_analysis_completed")
        return lead

    def update_status(self, db: Session, lead_id: str, status: LeadStatus) -> Lead:
        lead = self.get_or_404(db, lead_id)
        lead.status = status.value
        self._save(db, lead, "update_lead_status")
        return lead

    def _save(self, db: Session, lead: Lead, operation: str) -> None:
        try:
            db.add(lead)
            db.commit()
            db.refresh(lead)
        except SQLAlchemyError as e:
            db.rollback()
            self.log_error(e, operation)
            raise DatabaseError("Failed to save lead")
        self.log_operation(operation, lead_id=lead.id)


lead_service = LeadService()
