"""PayPal request payloads for payments, billing plans and agreements"""

from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional
from paypal_plans.domain.models import PlanKind, PlanRequest
from paypal_plans.utils.date_utils import start_after

APPROVAL_REL = "approval_url"
COMPLETED_STATUS = "Completed"

RECURRING_START_DELAY = timedelta(seconds=60)
INSTALLMENT_START_DELAY = timedelta(days=1)

PLAN_TYPES = {
    PlanKind.RECURRING: "INFINITE",
    PlanKind.FIXED_RECURRING: "FIXED",
    PlanKind.INSTALLMENTS: "FIXED",
}

PLAN_DESCRIPTIONS = {
    PlanKind.RECURRING: "Recurring subscription",
    PlanKind.FIXED_RECURRING: "Fixed recurring subscription",
    PlanKind.INSTALLMENTS: "Plan with initial payment and recurring payments",
}


def format_money(value: Decimal) -> str:
    """PayPal amounts are strings with exactly two decimals"""
    return str(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def money(currency: str, value: Decimal) -> Dict[str, str]:
    return {"currency": currency, "value": format_money(value)}


def build_one_time_payment(plan: PlanRequest) -> Dict[str, Any]:
    """Single ``sale`` transaction paid through PayPal checkout"""
    total = format_money(plan.amount)
    return {
        "intent": "sale",
        "payer": {"payment_method": "paypal"},
        "redirect_urls": {
            "return_url": plan.return_url,
            "cancel_url": plan.cancel_url or plan.return_url,
        },
        "transactions": [
            {
                "item_list": {
                    "items": [
                        {
                            "name": plan.plan_name,
                            "sku": "item",
                            "price": total,
                            "currency": plan.currency,
                            "quantity": 1,
                        }
                    ]
                },
                "amount": {
                    "currency": plan.currency,
                    "total": total,
                    "details": {"subtotal": total, "tax": "0.00", "shipping": "0.00"},
                },
                "description": plan.description,
            }
        ],
    }


def build_trial_phase(plan: PlanRequest) -> Dict[str, Any]:
    """Free daily phase lasting ``trial_period_days``"""
    return {
        "name": f"{plan.plan_name} Trial Period",
        "type": "TRIAL",
        "frequency": "DAY",
        "frequency_interval": "1",
        "cycles": str(plan.trial_period_days),
        "amount": money(plan.currency, Decimal("0")),
    }


def build_payment_definitions(plan: PlanRequest, kind: PlanKind) -> List[Dict[str, Any]]:
    """Billing phases: the optional trial always comes before the regular phase"""
    cycles = "0" if kind == PlanKind.RECURRING else str(plan.cycles)

    definitions = []
    if plan.trial_period_days > 0:
        definitions.append(build_trial_phase(plan))

    definitions.append(
        {
            "name": f"{plan.plan_name} Regular Payments",
            "type": "REGULAR",
            "frequency": plan.frequency,
            "frequency_interval": str(plan.frequency_interval),
            "cycles": cycles,
            "amount": money(plan.currency, plan.amount),
        }
    )
    return definitions


def build_merchant_preferences(plan: PlanRequest, setup_fee: Decimal) -> Dict[str, Any]:
    return {
        "setup_fee": money(plan.currency, setup_fee),
        "cancel_url": plan.cancel_url or plan.return_url,
        "return_url": plan.return_url,
        "max_fail_attempts": "1",
        "auto_bill_amount": "YES",
        "initial_fail_amount_action": "CONTINUE",
    }


def build_billing_plan(plan: PlanRequest, kind: PlanKind) -> Dict[str, Any]:
    """
    Billing plan for a recurring, fixed or installment plan.

    Only installment plans charge a setup fee: the normalized initial amount,
    billed as soon as the agreement is executed.
    """
    if kind == PlanKind.INSTALLMENTS:
        setup_fee = plan.initial_amount or Decimal("0")
    else:
        setup_fee = Decimal("0")

    return {
        "name": plan.plan_name,
        "description": plan.description or PLAN_DESCRIPTIONS[kind],
        "type": PLAN_TYPES[kind],
        "payment_definitions": build_payment_definitions(plan, kind),
        "merchant_preferences": build_merchant_preferences(plan, setup_fee),
    }


def build_activation_patch() -> List[Dict[str, Any]]:
    return [{"op": "replace", "path": "/", "value": {"state": "ACTIVE"}}]


def build_billing_agreement(
    plan: PlanRequest,
    kind: PlanKind,
    plan_id: str,
    recurring_delay: timedelta = RECURRING_START_DELAY,
    installment_delay: timedelta = INSTALLMENT_START_DELAY,
) -> Dict[str, Any]:
    """Agreement subscribing the payer to an activated billing plan"""
    delay = installment_delay if kind == PlanKind.INSTALLMENTS else recurring_delay
    return {
        "name": f"{plan.plan_name} Agreement",
        "description": plan.description or PLAN_DESCRIPTIONS[kind],
        "start_date": start_after(delay, plan.start_date),
        "plan": {"id": plan_id},
        "payer": {"payment_method": "paypal"},
    }


def build_refund(amount: Decimal, currency: str) -> Dict[str, Any]:
    return {"amount": {"total": format_money(amount), "currency": currency.upper()}}


def extract_approval_link(resource: Dict[str, Any]) -> str:
    """URL the payer must visit to approve, or empty string when absent"""
    link = ""
    for entry in resource.get("links", []):
        if entry.get("rel") == APPROVAL_REL:
            link = entry.get("href", "")
    return link


def latest_sale_id(transactions: List[Dict[str, Any]]) -> Optional[str]:
    """Pick the most recent completed transaction of a billing agreement"""
    completed = [
        t for t in transactions
        if t.get("status") == COMPLETED_STATUS and t.get("transaction_id")
    ]
    if not completed:
        return None
    # ISO-8601 UTC timestamps sort lexicographically
    return max(completed, key=lambda t: t.get("time_stamp", ""))["transaction_id"]
