import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.database import get_db
from src.models.dto.health import HealthDetailedResponse

router = APIRouter(tags=["health"])


async def _check_database(db: AsyncSession) -> dict:
    try:
        start = time.monotonic()
        await db.execute(text("SELECT 1"))
        latency_ms = round((time.monotonic() - start) * 1000)
        return {"status": "up", "latency_ms": latency_ms}
    except Exception as e:
        return {"status": "down", "error": str(e)}


@router.get("/health", response_model=HealthDetailedResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    checks = {"database": await _check_database(db)}
    overall = "healthy" if checks["database"]["status"] == "up" else "unhealthy"
    return {"status": overall, "version": "1.0.0", "checks": checks}
