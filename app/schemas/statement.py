"""Statement schemas"""

from datetime import datetime
from typing import List
from pydantic import Field
from app.schemas.base import BaseSchema
from app.schemas.analysis import AnalysisResult


class StatementResponse(BaseSchema):
    id: str
    file_name: str
    file_type: str
    file_size: int
    uploaded_at: datetime


class StatementUploadResponse(BaseSchema):
    message: str
    statements: List[StatementResponse]


class StatementListResponse(BaseSchema):
    statements: List[StatementResponse]


class AnalyzeRequest(BaseSchema):
    statement_ids: List[str] = Field(..., min_length=1)


class AnalyzeResponse(BaseSchema):
    message: str
    analysis: AnalysisResult
    analyzed_statements: List[str]


class QuickAnalyzeResponse(BaseSchema):
    message: str
    analysis: AnalysisResult
    saved: bool
