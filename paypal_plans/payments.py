"""
Public PayPal operations.

Every function returns an :class:`Envelope` and never raises. Input is
validated first; a failed validation never reaches PayPal.
"""

import time
import logging
from datetime import timedelta
from decimal import Decimal
from typing import Any, Awaitable, Callable, Mapping, Optional, Type

import httpx
from pydantic import BaseModel

from paypal_plans.config import settings
from paypal_plans.domain.amounts import normalize_plan
from paypal_plans.domain.exceptions import DomainException, GatewayError, SaleNotFoundError
from paypal_plans.domain.models import Envelope, PlanKind
from paypal_plans.domain.plans import (
    build_activation_patch,
    build_billing_agreement,
    build_billing_plan,
    build_one_time_payment,
    build_refund,
    extract_approval_link,
    latest_sale_id,
)
from paypal_plans.domain.validation import (
    ConfigureSchema,
    ExecuteAgreementSchema,
    ExecutePaymentSchema,
    FixedRecurringPlanSchema,
    InstallmentPlanSchema,
    OneTimePaymentSchema,
    RecurringPlanSchema,
    RefundSchema,
    SubscriptionSchema,
    ValidationResult,
    to_plan_request,
    validate,
)
from paypal_plans.infrastructure.clients.paypal import PayPalClient
from paypal_plans.infrastructure.observability.logging import log_operation
from paypal_plans.infrastructure.observability.metrics import plans_created_counter, record_operation
from paypal_plans.utils.date_utils import sale_search_window

CANCEL_NOTE = "Subscription cancelled by merchant"


def _finish(operation: str, envelope: Envelope, outcome: str, start_time: float) -> Envelope:
    record_operation(operation, outcome)
    log_operation(operation, envelope.error, (time.time() - start_time) * 1000, envelope.message)
    return envelope


def _check(operation: str, schema: Type[BaseModel], body: Mapping[str, Any]) -> ValidationResult:
    result = validate(schema, body)
    if not result.valid:
        logging.warning(f"Validation failed for {operation}: {result.message}")
    return result


async def _guarded(
    operation: str,
    fallback: str,
    steps: Callable[[], Awaitable[Any]],
    start_time: float,
) -> Envelope:
    """Run the gateway steps of an operation, folding any failure into an envelope"""
    try:
        response = await steps()
    except GatewayError as e:
        logging.error(
            f"PayPal error during {operation}: {e}",
            extra={"status_code": e.status_code, "debug_id": e.debug_id},
        )
        return _finish(operation, Envelope.fail(e.detail_message or fallback), "gateway_error", start_time)
    except DomainException as e:
        logging.warning(f"{operation} rejected: {e}")
        return _finish(operation, Envelope.fail(str(e)), "rejected", start_time)
    except Exception as e:
        logging.error(f"Unexpected error during {operation}: {e}")
        return _finish(operation, Envelope.fail(str(e)), "unexpected_error", start_time)

    return _finish(operation, Envelope.ok(response), "success", start_time)


def configure(
    mode: str,
    client_id: str,
    client_secret: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Envelope:
    """
    Build the PayPal handle every other operation takes.

    Args:
        mode: "sandbox" or "live"
        transport: Optional httpx transport, used by tests to stub PayPal

    Returns:
        Envelope whose response is a :class:`PayPalClient`
    """
    start_time = time.time()
    result = _check(
        "configure",
        ConfigureSchema,
        {"mode": mode or "sandbox", "client_id": client_id, "client_secret": client_secret},
    )
    if not result.valid:
        return _finish("configure", Envelope.fail(result.message), "validation_error", start_time)

    data = result.data
    client = PayPalClient(
        mode=data.mode,
        client_id=data.client_id,
        client_secret=data.client_secret,
        transport=transport,
    )
    return _finish("configure", Envelope.ok(client), "success", start_time)


async def create_one_time_payment(body: Mapping[str, Any], client: PayPalClient) -> Envelope:
    """
    Create a single PayPal payment.

    Returns:
        Envelope with ``{"payment": ..., "approval_link": ...}``
    """
    operation = "create_one_time_payment"
    start_time = time.time()
    result = _check(operation, OneTimePaymentSchema, body)
    if not result.valid:
        return _finish(operation, Envelope.fail(result.message), "validation_error", start_time)

    async def steps():
        plan = to_plan_request(result.data)
        normalize_plan(plan, PlanKind.ONE_TIME)
        payload = build_one_time_payment(plan)

        async with client.session() as paypal:
            payment = await paypal.create_payment(payload)

        plans_created_counter.labels(kind=PlanKind.ONE_TIME.value).inc()
        return {"payment": payment, "approval_link": extract_approval_link(payment)}

    return await _guarded(operation, "Could not make payment", steps, start_time)


async def _create_agreement(
    operation: str,
    kind: PlanKind,
    schema: Type[BaseModel],
    body: Mapping[str, Any],
    client: PayPalClient,
) -> Envelope:
    """
    Create billing plan, activate it, then create the billing agreement.

    Steps run strictly in order and stop at the first failure. A plan that
    was created before a later step failed is left in place.
    """
    start_time = time.time()
    result = _check(operation, schema, body)
    if not result.valid:
        return _finish(operation, Envelope.fail(result.message), "validation_error", start_time)

    async def steps():
        plan = to_plan_request(result.data)
        normalize_plan(plan, kind)
        billing_plan = build_billing_plan(plan, kind)

        async with client.session() as paypal:
            created = await paypal.create_billing_plan(billing_plan)
            plan_id = created["id"]
            await paypal.update_billing_plan(plan_id, build_activation_patch())
            agreement = await paypal.create_billing_agreement(
                build_billing_agreement(
                    plan,
                    kind,
                    plan_id,
                    recurring_delay=timedelta(seconds=settings.recurring_start_delay_seconds),
                    installment_delay=timedelta(days=settings.installment_start_delay_days),
                )
            )

        plans_created_counter.labels(kind=kind.value).inc()
        return {"agreement": agreement, "approval_link": extract_approval_link(agreement)}

    return await _guarded(operation, "Could not create billing agreement", steps, start_time)


async def create_recurring_plan(body: Mapping[str, Any], client: PayPalClient) -> Envelope:
    """Open-ended subscription billed until cancelled"""
    return await _create_agreement("create_recurring_plan", PlanKind.RECURRING, RecurringPlanSchema, body, client)


async def create_fixed_recurring_plan(body: Mapping[str, Any], client: PayPalClient) -> Envelope:
    """Subscription whose total is spread over ``cycles`` payments"""
    return await _create_agreement(
        "create_fixed_recurring_plan", PlanKind.FIXED_RECURRING, FixedRecurringPlanSchema, body, client
    )


async def create_installment_plan(body: Mapping[str, Any], client: PayPalClient) -> Envelope:
    """Upfront ``initial_amount`` charged as setup fee, remainder in ``cycles`` payments"""
    return await _create_agreement(
        "create_installment_plan", PlanKind.INSTALLMENTS, InstallmentPlanSchema, body, client
    )


async def execute_payment(payment_id: str, payer_id: str, client: PayPalClient) -> Envelope:
    """Capture a one-time payment after the payer approved it"""
    operation = "execute_payment"
    start_time = time.time()
    result = _check(operation, ExecutePaymentSchema, {"payment_id": payment_id, "payer_id": payer_id})
    if not result.valid:
        return _finish(operation, Envelope.fail(result.message), "validation_error", start_time)

    async def steps():
        async with client.session() as paypal:
            return await paypal.execute_payment(payment_id, payer_id)

    return await _guarded(operation, "Could not execute payment", steps, start_time)


async def execute_billing_agreement(token: str, client: PayPalClient) -> Envelope:
    """Activate a billing agreement with the token PayPal appended to the return URL"""
    operation = "execute_billing_agreement"
    start_time = time.time()
    result = _check(operation, ExecuteAgreementSchema, {"token": token})
    if not result.valid:
        return _finish(operation, Envelope.fail(result.message), "validation_error", start_time)

    async def steps():
        async with client.session() as paypal:
            return await paypal.execute_billing_agreement(token)

    return await _guarded(operation, "Could not execute billing agreement", steps, start_time)


async def cancel_subscription(
    subscription_id: str,
    client: PayPalClient,
    note: str = CANCEL_NOTE,
) -> Envelope:
    operation = "cancel_subscription"
    start_time = time.time()
    result = _check(operation, SubscriptionSchema, {"subscription_id": subscription_id})
    if not result.valid:
        return _finish(operation, Envelope.fail(result.message), "validation_error", start_time)

    async def steps():
        async with client.session() as paypal:
            await paypal.cancel_billing_agreement(subscription_id, note)
        return {"subscription_id": subscription_id, "state": "Cancelled"}

    return await _guarded(operation, "Could not cancel subscription", steps, start_time)


async def get_latest_sale_id(subscription_id: str, client: PayPalClient) -> Envelope:
    """Most recent completed sale of a billing agreement, searched over a fixed window"""
    operation = "get_latest_sale_id"
    start_time = time.time()
    result = _check(operation, SubscriptionSchema, {"subscription_id": subscription_id})
    if not result.valid:
        return _finish(operation, Envelope.fail(result.message), "validation_error", start_time)

    async def steps():
        start_date, end_date = sale_search_window(settings.sale_history_start_date)
        async with client.session() as paypal:
            transactions = await paypal.list_agreement_transactions(subscription_id, start_date, end_date)

        sale_id = latest_sale_id(transactions)
        if sale_id is None:
            raise SaleNotFoundError(f"No completed sale found for subscription {subscription_id}")
        return sale_id

    return await _guarded(operation, "Could not fetch subscription transactions", steps, start_time)


async def refund_payment(sale_id: str, amount: Decimal, currency: str, client: PayPalClient) -> Envelope:
    operation = "refund_payment"
    start_time = time.time()
    result = _check(operation, RefundSchema, {"sale_id": sale_id, "amount": amount, "currency": currency})
    if not result.valid:
        return _finish(operation, Envelope.fail(result.message), "validation_error", start_time)

    async def steps():
        data = result.data
        async with client.session() as paypal:
            return await paypal.refund_sale(data.sale_id, build_refund(data.amount, data.currency))

    return await _guarded(operation, "Could not refund payment", steps, start_time)
