"""API endpoints for billing operations.

This module provides the HTTP interface for billing operations,
delegating all business logic to the billing service.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel import schemas
from vatcounsel.api import deps
from vatcounsel.api.context import ApiContext
from vatcounsel.api.deps import Inject
from vatcounsel.api.middleware import error_response
from vatcounsel.core.logging import logger
from vatcounsel.domains.billing.exceptions import WebhookVerificationError
from vatcounsel.domains.billing.protocols import BillingServiceProtocol, BillingWebhookProtocol
from vatcounsel.domains.usage.protocols import UsageServiceProtocol

router = APIRouter()


@router.get("/status", response_model=schemas.ApiResponse[schemas.BillingStatusResponse])
async def get_billing_status(
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    billing: BillingServiceProtocol = Inject(BillingServiceProtocol),
) -> schemas.ApiResponse[schemas.BillingStatusResponse]:
    """Get the user's subscription status."""
    status = await billing.get_billing_status(db, ctx.user_id)
    return schemas.ApiResponse(data=schemas.BillingStatusResponse.from_status(status))


@router.get("/plan", response_model=schemas.ApiResponse[schemas.PlanResponse])
async def get_plan(
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    usage_service: UsageServiceProtocol = Inject(UsageServiceProtocol),
) -> schemas.ApiResponse[schemas.PlanResponse]:
    """Get the user's plan, monthly limit and remaining balance.

    The plan is the resolved entitlement, so overrides and trials show up
    here even though they have no subscription row.
    """
    snapshot = await usage_service.get_usage_snapshot(db, ctx.user_id)
    return schemas.ApiResponse(data=schemas.PlanResponse.from_snapshot(snapshot))


@router.post(
    "/checkout-session", response_model=schemas.ApiResponse[schemas.SessionUrlResponse]
)
async def create_checkout_session(
    request: schemas.CheckoutSessionRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    billing: BillingServiceProtocol = Inject(BillingServiceProtocol),
) -> schemas.ApiResponse[schemas.SessionUrlResponse]:
    """Create a Stripe checkout session for the PREMIUM subscription.

    Args:
        request: Checkout request naming the plan
        db: Database session
        ctx: Authentication context
        billing: Billing service

    Returns:
        Checkout session URL to redirect the user to
    """
    ctx.logger.info(f"Starting checkout for plan {request.plan}")
    url = await billing.create_checkout_session(db, ctx.user_id, ctx.email)
    return schemas.ApiResponse(data=schemas.SessionUrlResponse(url=url))


@router.post("/portal-session", response_model=schemas.ApiResponse[schemas.SessionUrlResponse])
async def create_portal_session(
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    billing: BillingServiceProtocol = Inject(BillingServiceProtocol),
) -> schemas.ApiResponse[schemas.SessionUrlResponse]:
    """Create a Stripe customer portal session.

    The customer portal allows users to:
    - Update payment methods
    - Download invoices
    - Cancel the subscription
    """
    url = await billing.create_portal_session(db, ctx.user_id)
    return schemas.ApiResponse(data=schemas.SessionUrlResponse(url=url))


@router.post("/webhook", include_in_schema=False, response_model=schemas.WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    db: AsyncSession = Depends(deps.get_db),
    webhook: BillingWebhookProtocol = Inject(BillingWebhookProtocol),
):
    """Handle Stripe webhook events.

    Security:
    - Verifies webhook signature (inside processor)
    - Idempotent processing by event id

    Returns:
        200 ``{"received": true}`` on success, 400 on signature error,
        500 on processing error so that Stripe retries
    """
    payload = await request.body()

    try:
        await webhook.process_webhook(db, payload, stripe_signature or "")
    except WebhookVerificationError:
        raise
    except Exception as e:
        logger.error(f"Webhook handler failed: {e}", exc_info=True)
        return error_response(500, "Webhook handler failed", "INTERNAL_ERROR")

    return schemas.WebhookAck()
