"""Report schemas"""

from datetime import datetime
from typing import List, Optional
from pydantic import Field
from app.schemas.base import BaseSchema, TimestampMixin
from app.schemas.analysis import AnalysisResult, PeriodCovered


class ReportCreate(BaseSchema):
    statement_ids: List[str] = Field(default_factory=list)
    analysis: AnalysisResult


class AddStatementsRequest(BaseSchema):
    statement_ids: List[str] = Field(..., min_length=1)


class ReportResponse(TimestampMixin):
    id: str
    statement_ids: List[str]
    analysis: AnalysisResult


class ReportEnvelope(BaseSchema):
    message: Optional[str] = None
    report: ReportResponse


class ReportSummary(TimestampMixin):
    id: str
    business_name: Optional[str] = None
    period_covered: Optional[PeriodCovered] = None
    fundability_score: Optional[float] = None


class ReportListResponse(BaseSchema):
    reports: List[ReportSummary]


class MonthlyHistoryEntry(BaseSchema):
    month: str
    month_name: str
    beginning_balance: Optional[float] = None
    ending_balance: Optional[float] = None
    total_deposits: Optional[float] = None
    total_withdrawals: Optional[float] = None
    negative_days: int = 0
    average_daily_balance: Optional[float] = None
    created_at: datetime


class MonthlyHistoryResponse(BaseSchema):
    monthly_history: List[MonthlyHistoryEntry]
