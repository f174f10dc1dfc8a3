"""Bank statement model"""

from sqlalchemy import Column, String, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship
from app.models.base import BaseModel

DOCUMENT_TYPES = {"application/pdf"}
IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


class Statement(BaseModel):
    """An uploaded bank statement file (PDF or image)"""

    __tablename__ = "statements"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(50), nullable=False)
    file_size = Column(Integer, nullable=False)
    storage_public_id = Column(String(255), nullable=True)
    storage_url = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="statements")

    @property
    def uploaded_at(self):
        return self.created_at
