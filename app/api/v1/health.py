"""
Health check endpoint
"""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Liveness plus a round trip to the ledger database.

    Returns 503 when the database cannot be reached, since no leave
    transition can commit without it.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check: ledger database unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "degraded", "service": "leave-ledger-backend", "database": "unavailable"},
        )
    return {"status": "ok", "service": "leave-ledger-backend", "database": "ok"}
