"""Pydantic schemas for the HTTP API."""

from vatcounsel.schemas.billing import (
    BillingStatusResponse,
    CheckoutSessionRequest,
    SessionUrlResponse,
    WebhookAck,
)
from vatcounsel.schemas.common import ApiResponse, CamelModel
from vatcounsel.schemas.health import HealthResponse
from vatcounsel.schemas.usage import PlanResponse, UsageSnapshotResponse

__all__ = [
    "ApiResponse",
    "BillingStatusResponse",
    "CamelModel",
    "CheckoutSessionRequest",
    "HealthResponse",
    "PlanResponse",
    "SessionUrlResponse",
    "UsageSnapshotResponse",
    "WebhookAck",
]
