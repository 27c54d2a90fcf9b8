"""Health check endpoints."""

from fastapi import APIRouter

from vatcounsel.schemas import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check if the API is healthy.

    Returns:
    --------
        HealthResponse: The status of the API.
    """
    return HealthResponse()
