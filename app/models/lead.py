"""Lead model for email capture before sign-up"""

from enum import Enum as PyEnum
from sqlalchemy import Column, String, Boolean
from app.models.base import BaseModel


class LeadStatus(PyEnum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"
    LOST = "lost"


class Lead(BaseModel):
    """A prospect who left an email on the landing page"""

    __tablename__ = "leads"

    email = Column(String(255), unique=True, index=True, nullable=False)
    business_name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    source = Column(String(100), nullable=False, default="organic")
    status = Column(String(20), nullable=False, default=LeadStatus.NEW.value)
    analysis_completed = Column(Boolean, nullable=False, default=False)
