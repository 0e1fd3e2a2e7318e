"""Subscription endpoints: cancel and latest sale lookup"""

from fastapi import APIRouter, Depends

from paypal_plans.api.dependencies import get_paypal_client
from paypal_plans.api.v1.schemas import EnvelopeResponse
from paypal_plans.infrastructure.clients.paypal import PayPalClient
from paypal_plans import payments

router = APIRouter()


@router.post("/subscriptions/{subscription_id}/cancel", response_model=EnvelopeResponse)
async def cancel_subscription(
    subscription_id: str,
    client: PayPalClient = Depends(get_paypal_client),
):
    return EnvelopeResponse.from_envelope(await payments.cancel_subscription(subscription_id, client))


@router.get("/subscriptions/{subscription_id}/latest-sale", response_model=EnvelopeResponse)
async def get_latest_sale(
    subscription_id: str,
    client: PayPalClient = Depends(get_paypal_client),
):
    """Sale id to pass to the refund endpoint"""
    return EnvelopeResponse.from_envelope(await payments.get_latest_sale_id(subscription_id, client))
