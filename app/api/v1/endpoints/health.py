"""Health check endpoints"""

import time
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.config import settings
from app.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/")
def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": time.time()
    }


@router.get("/detailed")
def detailed_health_check(db: Session = Depends(get_db)):
    """Health check including the database round trip"""

    health_status = {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": time.time(),
        "checks": {}
    }

    start = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = {
            "status": "healthy",
            "response_time_ms": round((time.perf_counter() - start) * 1000, 2)
        }
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "error": str(e)
        }
        health_status["status"] = "unhealthy"

    # External services: configuration only, no network calls
    health_status["checks"]["gemini"] = {
        "status": "configured" if settings.GEMINI_API_KEY else "not_configured",
        "model": settings.GEMINI_MODEL
    }
    health_status["checks"]["file_storage"] = {
        "status": "configured" if settings.CLOUDINARY_CLOUD_NAME else "not_configured",
        "provider": "cloudinary"
    }

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(status_code=status_code, content=health_status)
