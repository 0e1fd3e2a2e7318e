"""One-time payment endpoints: create, execute and refund"""

from typing import Any, Dict
from fastapi import APIRouter, Body, Depends

from paypal_plans.api.dependencies import get_paypal_client
from paypal_plans.api.v1.schemas import EnvelopeResponse
from paypal_plans.infrastructure.clients.paypal import PayPalClient
from paypal_plans import payments

router = APIRouter()


@router.post("/payments", response_model=EnvelopeResponse)
async def create_payment(
    body: Dict[str, Any] = Body(...),
    client: PayPalClient = Depends(get_paypal_client),
):
    """
    Create a one-time payment.

    The payer must be redirected to ``response.approval_link``.
    """
    return EnvelopeResponse.from_envelope(await payments.create_one_time_payment(body, client))


@router.post("/payments/{payment_id}/execute", response_model=EnvelopeResponse)
async def execute_payment(
    payment_id: str,
    body: Dict[str, Any] = Body(default_factory=dict),
    client: PayPalClient = Depends(get_paypal_client),
):
    return EnvelopeResponse.from_envelope(
        await payments.execute_payment(payment_id, body.get("payer_id", ""), client)
    )


@router.post("/sales/{sale_id}/refund", response_model=EnvelopeResponse)
async def refund_sale(
    sale_id: str,
    body: Dict[str, Any] = Body(default_factory=dict),
    client: PayPalClient = Depends(get_paypal_client),
):
    return EnvelopeResponse.from_envelope(
        await payments.refund_payment(sale_id, body.get("amount"), body.get("currency", ""), client)
    )
