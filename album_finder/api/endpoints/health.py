# ============================================================================
# FILE: album_finder/api/endpoints/health.py
# ============================================================================
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from album_finder.db.session import Database, get_database
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/health")
async def health_check(request: Request, database: Database = Depends(get_database)):
    """Report whether the database answers"""
    try:
        now = await database.now()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Database connection error",
                "error": str(e) if request.app.state.settings.DEBUG else "Internal server error",
            },
        )

    return {
        "success": True,
        "message": "Server is running",
        "database": "Connected",
        "timestamp": now.isoformat() if now else None,
    }
