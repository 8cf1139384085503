import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare.database import check_db_connectivity, get_db
from foodshare.utils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health():
    return {
        "status": "OK",
        "message": "Food Redistribution API is running",
        "timestamp": utcnow().isoformat() + "Z",
    }


@router.get("/db-test")
async def db_test(db: AsyncSession = Depends(get_db)):
    if not await check_db_connectivity(db):
        logger.error("Database connectivity check failed")
        return JSONResponse(
            status_code=500,
            content={"status": "ERROR", "message": "Database connection failed"},
        )
    return {
        "status": "OK",
        "message": "Database connection successful",
        "current_time": utcnow().isoformat() + "Z",
    }
