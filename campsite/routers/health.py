"""
Health Check Endpoints

- /health - basic status
- /health/live - Liveness check (is process running)
- /health/ready - Readiness check (can the database be reached)
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime, timezone
import logging
import time

from ..database import get_db
from .. import __version__

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def get_db_health(db: Session) -> dict:
    """Check database connectivity and latency"""
    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        latency_ms = (time.time() - start) * 1000
        return {
            "status": "up",
            "latency_ms": round(latency_ms, 2),
            "type": db.bind.dialect.name
        }
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "down",
            "error": str(e)[:100]
        }


@router.get("")
@router.get("/")
def health_check():
    return {"status": "healthy", "version": __version__}


@router.get("/live")
def liveness():
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
def readiness(db: Session = Depends(get_db)):
    database = get_db_health(db)
    ready = database["status"] == "up"
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "not_ready",
            "checks": {"database": database},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )
