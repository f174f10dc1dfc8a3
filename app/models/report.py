"""Report and monthly snapshot models"""

from sqlalchemy import Column, String, Integer, Float, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class Report(BaseModel):
    """One merchant's financial history.

    ``analysis_data`` holds the camelCase ``AnalysisResult`` JSON and is
    overwritten on every merge; ``statement_ids`` only ever grows.
    """

    __tablename__ = "reports"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    statement_ids = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    analysis_data = Column(JSON, nullable=False)

    # Relationships
    user = relationship("User", back_populates="reports")
    monthly_snapshots = relationship(
        "MonthlySnapshot", back_populates="report", cascade="all, delete-orphan"
    )

    @property
    def business_name(self):
        return (self.analysis_data or {}).get("businessName")

    @property
    def period_covered(self):
        return (self.analysis_data or {}).get("periodCovered")

    @property
    def fundability_score(self):
        return ((self.analysis_data or {}).get("fundabilityAssessment") or {}).get("score")


class MonthlySnapshot(BaseModel):
    """Append-only copy of one month of a report's analysis"""

    __tablename__ = "monthly_snapshots"
    __table_args__ = (
        UniqueConstraint("user_id", "report_id", "month", name="uq_snapshot_owner_report_month"),
    )

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    report_id = Column(String(36), ForeignKey("reports.id", ondelete="CASCADE"), nullable=False)
    month = Column(String(7), nullable=False, index=True)
    month_name = Column(String(50), nullable=False, default="")
    beginning_balance = Column(Float, nullable=True)
    ending_balance = Column(Float, nullable=True)
    total_deposits = Column(Float, nullable=True)
    total_withdrawals = Column(Float, nullable=True)
    negative_days = Column(Integer, nullable=False, default=0)
    average_daily_balance = Column(Float, nullable=True)

    # Relationships
    report = relationship("Report", back_populates="monthly_snapshots")
