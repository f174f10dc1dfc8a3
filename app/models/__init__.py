"""Database models"""
from app.models.user import User
from app.models.statement import Statement
from app.models.report import Report, MonthlySnapshot
from app.models.lead import Lead, LeadStatus

__all__ = [
    'User',
    'Statement',
    'Report',
    'MonthlySnapshot',
    'Lead',
    'LeadStatus',
]
