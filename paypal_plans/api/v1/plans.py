"""Billing plan endpoints: recurring, fixed and installment agreements"""

from typing import Any, Dict
from fastapi import APIRouter, Body, Depends

from paypal_plans.api.dependencies import get_paypal_client
from paypal_plans.api.v1.schemas import EnvelopeResponse
from paypal_plans.infrastructure.clients.paypal import PayPalClient
from paypal_plans import payments

router = APIRouter()


@router.post("/plans/recurring", response_model=EnvelopeResponse)
async def create_recurring_plan(
    body: Dict[str, Any] = Body(...),
    client: PayPalClient = Depends(get_paypal_client),
):
    """Open-ended subscription"""
    return EnvelopeResponse.from_envelope(await payments.create_recurring_plan(body, client))


@router.post("/plans/fixed", response_model=EnvelopeResponse)
async def create_fixed_recurring_plan(
    body: Dict[str, Any] = Body(...),
    client: PayPalClient = Depends(get_paypal_client),
):
    return EnvelopeResponse.from_envelope(await payments.create_fixed_recurring_plan(body, client))


@router.post("/plans/installments", response_model=EnvelopeResponse)
async def create_installment_plan(
    body: Dict[str, Any] = Body(...),
    client: PayPalClient = Depends(get_paypal_client),
):
    return EnvelopeResponse.from_envelope(await payments.create_installment_plan(body, client))


@router.post("/agreements/{token}/execute", response_model=EnvelopeResponse)
async def execute_billing_agreement(
    token: str,
    client: PayPalClient = Depends(get_paypal_client),
):
    """
    Execute an approved billing agreement.

    ``token`` is the query parameter PayPal appends to the return URL.
    """
    return EnvelopeResponse.from_envelope(await payments.execute_billing_agreement(token, client))
