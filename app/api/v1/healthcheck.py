from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas import ApiResponse, HealthResponse

router = APIRouter(prefix="/healthcheck", tags=["Health"])


@router.get("", response_model=ApiResponse[HealthResponse])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check endpoint."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        db_status = "unhealthy"

    return ApiResponse.build(
        HealthResponse(
            status="ok" if db_status == "healthy" else "degraded",
            database=db_status,
        ),
        "Health check passed" if db_status == "healthy" else "Database unavailable",
    )
