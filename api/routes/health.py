"""Health check routes"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import logging

from api.dependencies import get_context
from app.context import AppContext

router = APIRouter(tags=["Health"])
logger = logging.getLogger("kitchen.api.health")


@router.get("/health-check")
def health_check(context: AppContext = Depends(get_context)):
    """Basic health check endpoint; reports whether the database answers"""
    database = "ok"
    try:
        with context.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("health_check_database_failed error=%s", exc)
        database = "unavailable"
    return {
        "status": "ok",
        "service": context.settings.app_name,
        "version": context.settings.app_version,
        "database": database,
    }
