# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + whether booking notifications are wired up.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.config import settings
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    result = {
        "status": "ok",
        "timestamp": datetime.now().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "notifications": "webhook" if settings.TEAMS_WEBHOOK_URL else "log-only",
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
