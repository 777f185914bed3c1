from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.domain.accounting.sequence_service import current_serial

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    database: str
    last_serial: int | None = None


@router.get("", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    """Check the database and report the last allocated journal serial."""
    try:
        db.execute(text("SELECT 1"))
        last_serial = current_serial(db)
        db_status = "healthy"
    except Exception as e:
        last_serial = None
        db_status = f"unhealthy: {str(e)}"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        database=db_status,
        last_serial=last_serial,
    )


@router.get("/ready", response_model=dict)
def readiness_check(db: Session = Depends(get_db)):
    """Readiness check."""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ready"}
    except Exception:
        return {"status": "not_ready"}


@router.get("/live", response_model=dict)
def liveness_check():
    """Liveness check."""
    return {"status": "alive"}
