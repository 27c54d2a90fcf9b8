"""Usage response schemas."""

from datetime import datetime

from pydantic import Field

from vatcounsel.domains.usage.types import EntitlementSource, PlanKey, UsageSnapshot
from vatcounsel.schemas.common import CamelModel


class UsageSnapshotResponse(CamelModel):
    """The user's consumption in the current period."""

    plan_key: PlanKey
    monthly_limit: int
    used: int
    remaining: int
    percent_used: int = Field(..., ge=0, description="Rounded percentage, may exceed 100")
    period_key: str = Field(..., description="Period start as YYYY-MM-DD")
    period_start: datetime
    period_end: datetime
    source: EntitlementSource

    model_config = {
        "json_schema_extra": {
            "example": {
                "planKey": "FREE",
                "monthlyLimit": 10,
                "used": 5,
                "remaining": 5,
                "percentUsed": 50,
                "periodKey": "2024-03-01",
                "periodStart": "2024-03-01T00:00:00Z",
                "periodEnd": "2024-04-01T00:00:00Z",
                "source": "default_free",
            }
        }
    }

    @classmethod
    def from_snapshot(cls, snapshot: UsageSnapshot) -> "UsageSnapshotResponse":
        """Build the response from a domain snapshot."""
        return cls(
            plan_key=snapshot.plan_key,
            monthly_limit=snapshot.monthly_limit,
            used=snapshot.used,
            remaining=snapshot.remaining,
            percent_used=snapshot.percent_used,
            period_key=snapshot.period_key,
            period_start=snapshot.period_start,
            period_end=snapshot.period_end,
            source=snapshot.source,
        )


class PlanResponse(CamelModel):
    """Plan, limit and remaining balance for the current period."""

    plan: PlanKey
    monthly_limit: int
    balance: int
    period_start: datetime
    period_end: datetime

    @classmethod
    def from_snapshot(cls, snapshot: UsageSnapshot) -> "PlanResponse":
        """Build the response from a domain snapshot."""
        return cls(
            plan=snapshot.plan_key,
            monthly_limit=snapshot.monthly_limit,
            balance=snapshot.remaining,
            period_start=snapshot.period_start,
            period_end=snapshot.period_end,
        )
