from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from src.config.database import async_session_manager
from src.errors import LotteryServiceError

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    database: str
    version: str = "0.1.0"


@router.get("/", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """
    Health check endpoint to verify the API is running and the store answers.
    """
    try:
        async with async_session_manager(auto_commit=False) as session:
            await session.execute(text("SELECT 1"))
    except LotteryServiceError as e:
        return HealthCheckResponse(status="degraded", database=e.kind)
    return HealthCheckResponse(status="healthy", database="ok")
