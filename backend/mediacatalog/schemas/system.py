"""System status schemas."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "OK"
    message: str = "Media Database Server is running"
    version: str
    service: str = "mediacatalog"
    environment: str
