"""Lead schemas"""

from typing import Optional
from pydantic import EmailStr, Field
from app.models.lead import LeadStatus
from app.schemas.base import BaseSchema


class LeadCreate(BaseSchema):
    email: EmailStr
    business_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    source: Optional[str] = Field(None, max_length=100)


class LeadStatusUpdate(BaseSchema):
    status: LeadStatus


class LeadResponse(BaseSchema):
    id: str
    email: str
    business_name: Optional[str] = None
    phone: Optional[str] = None
    analysis_completed: bool = False


class LeadEnvelope(BaseSchema):
    message: Optional[str] = None
    lead: LeadResponse
    is_returning: Optional[bool] = None
