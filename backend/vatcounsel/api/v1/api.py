"""API routes for the FastAPI application."""

from fastapi import APIRouter

from vatcounsel.api.v1.endpoints import billing, health, usage

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(usage.router, prefix="/usage", tags=["usage"])
api_router.include_router(billing.router, prefix="/billing", tags=["billing"])
