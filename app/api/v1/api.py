"""API v1 router"""

from fastapi import APIRouter
from app.api.v1.endpoints import auth, health, leads, reports, statements

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(statements.router, prefix="/statements", tags=["statements"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(leads.router, prefix="/leads", tags=["leads"])
