"""Health check endpoints."""

from fastapi import APIRouter

from mediacatalog import __version__
from mediacatalog.config import settings
from mediacatalog.schemas.system import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight connectivity check for the dashboard."""
    return HealthResponse(version=__version__, environment=settings.environment)


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}
