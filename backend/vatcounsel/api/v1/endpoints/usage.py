"""API endpoints for usage accounting.

Read-only: consumption itself happens inside the metered operations through
``UsageMeterProtocol``, never through a public endpoint.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel import schemas
from vatcounsel.api import deps
from vatcounsel.api.context import ApiContext
from vatcounsel.api.deps import Inject
from vatcounsel.domains.usage.protocols import UsageServiceProtocol

router = APIRouter()


@router.get("/me", response_model=schemas.ApiResponse[schemas.UsageSnapshotResponse])
async def get_my_usage(
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    usage_service: UsageServiceProtocol = Inject(UsageServiceProtocol),
) -> schemas.ApiResponse[schemas.UsageSnapshotResponse]:
    """Get the authenticated user's usage for the current period.

    Args:
        db: Database session
        ctx: Authentication context
        usage_service: Usage service

    Returns:
        Usage snapshot wrapped in the success envelope
    """
    snapshot = await usage_service.get_usage_snapshot(db, ctx.user_id)
    return schemas.ApiResponse(data=schemas.UsageSnapshotResponse.from_snapshot(snapshot))
