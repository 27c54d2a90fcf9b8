"""Health check response schemas."""

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response from the health check."""

    status: Literal["healthy"] = "healthy"
