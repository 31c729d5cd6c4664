"""
API layer for the recommendation engine.
"""

from .routes import router
from .schemas import HealthResponse, ErrorResponse

__all__ = [
    "router",
    "HealthResponse",
    "ErrorResponse",
]
