"""
Pydantic schemas for API request/response validation.
"""

from datetime import datetime, timezone
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(default="healthy")
    version: str
    mongodb_connected: bool
    fireworks_configured: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ErrorResponse(BaseModel):
    """Error body returned by HTTPException."""
    detail: str
