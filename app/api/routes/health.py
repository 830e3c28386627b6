from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from datetime import datetime, timezone
from app.config.settings import settings
from app.core.dependencies import get_test_case_sink
from app.repositories.interfaces.test_case_sink import ITestCaseSink

router = APIRouter(prefix="/health", tags=["health"])

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    environment: str


@router.get("/", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=VERSION,
        environment=settings.environment
    )


@router.get("/readiness")
async def readiness_check(sink: ITestCaseSink = Depends(get_test_case_sink)):
    """Readiness check endpoint"""
    # Parsing needs nothing external; confirming an import needs the persistence service
    checks = {
        "importer": "ok",
        "persistence": "ok" if sink.is_configured() else "not_configured"
    }

    all_ok = all(check == "ok" for check in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc)
    }
