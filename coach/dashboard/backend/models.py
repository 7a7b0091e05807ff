"""
API models shared by the app and every router.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ServiceState = Literal["healthy", "unhealthy", "configured", "not_configured"]


class HealthCheck(BaseModel):
    """Result of GET /api/health."""

    status: Literal["healthy", "degraded"] = "healthy"
    version: str
    timestamp: datetime = Field(default_factory=datetime.now)
    services: dict[str, ServiceState] = Field(
        default_factory=dict,
        description="memory_notes and inbox databases, messaging gateway credentials",
    )


class ErrorResponse(BaseModel):
    """Body of every non-validation error response."""

    error: str = Field(..., description="Human-readable message or machine error code")
    code: str = Field("INTERNAL_ERROR", description="HTTP_<status> or INTERNAL_ERROR")
    details: dict[str, Any] | None = None


class MessageResponse(BaseModel):
    """Acknowledgement for operations with nothing else to return."""

    message: str
