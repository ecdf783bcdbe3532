"""
Health check endpoint.

Used by load balancers, monitoring systems, and humans
to verify the application is running and responsive.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from general_ledger.models.base import get_db

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Return application health status including database connectivity.

    If the database query fails, the endpoint reports the
    service as degraded instead of raising.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "general-ledger",
        "database": db_status,
    }
