"""Discount, tax and amortization arithmetic for payment plans"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple
from paypal_plans.domain.models import NormalizedAmounts, PlanKind, PlanRequest

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TENTHS = Decimal("0.1")
CENTS = Decimal("0.01")

PERCENTAGE = "percentage"
CUSTOM_FREQUENCY = "custom"
SMALLEST_FREQUENCY = "DAY"


def _round(value: Decimal, places: Decimal) -> Decimal:
    return value.quantize(places, rounding=ROUND_HALF_UP)


def floor_at_zero(original: Decimal, discount_amount: Decimal) -> Decimal:
    """Subtract a discount, collapsing anything not strictly positive to zero"""
    remaining = original - discount_amount
    return remaining if remaining > 0 else ZERO


def apply_discount(
    amount: Decimal,
    initial_amount: Optional[Decimal],
    discount_type: str,
    discount: Decimal,
) -> Tuple[Decimal, Optional[Decimal]]:
    """
    Subtract a percentage or flat discount from amount and initial amount.

    A flat discount is taken in full from each field, not pro-rated.
    Each result is floored at zero and rounded to one decimal place.
    """
    if discount <= 0:
        return amount, initial_amount

    if discount_type == PERCENTAGE:
        fraction = discount / HUNDRED
        amount_off = amount * fraction
        initial_off = initial_amount * fraction if initial_amount is not None else ZERO
    else:
        amount_off = discount
        initial_off = discount

    discounted = _round(floor_at_zero(amount, amount_off), TENTHS)
    if initial_amount is None:
        return discounted, None
    return discounted, _round(floor_at_zero(initial_amount, initial_off), TENTHS)


def installment_discount_percentage(amount: Decimal, discount_type: str, discount: Decimal) -> Decimal:
    """Express an installment discount as a percentage of the total price"""
    if discount <= 0:
        return ZERO
    if discount_type == PERCENTAGE:
        return discount
    return discount / amount * HUNDRED


def apply_installment_discount(
    amount: Decimal,
    initial_amount: Decimal,
    discount_type: str,
    discount: Decimal,
) -> Tuple[Decimal, Decimal]:
    """
    Discount an installment plan multiplicatively.

    The total ``amount`` is split into the upfront ``initial_amount`` and the
    remainder paid in installments; both parts are scaled by the same factor.
    There is no floor on this path.

    Returns:
        (remainder, initial_amount) after discount
    """
    percentage = installment_discount_percentage(amount, discount_type, discount)
    factor = 1 - percentage / HUNDRED

    discounted_initial = _round(initial_amount * factor, CENTS)
    discounted_remainder = (amount - initial_amount) * factor
    return discounted_remainder, discounted_initial


def apply_tax(value: Decimal, tax: Decimal) -> Decimal:
    """Add a percentage tax once, rounding to cents"""
    if tax <= 0:
        return value
    return _round(value + value * (tax / HUNDRED), CENTS)


def amortize(amount: Decimal, cycles: int) -> Decimal:
    """Spread a total over billing cycles; zero cycles leaves it untouched"""
    if cycles > 0:
        return _round(amount / cycles, CENTS)
    return amount


def normalize(
    amount: Decimal,
    initial_amount: Optional[Decimal],
    discount_type: str,
    discount: Decimal,
    tax: Decimal,
    cycles: int,
) -> NormalizedAmounts:
    """Discount, tax and amortize amounts of one-time, recurring and fixed plans"""
    amount, initial_amount = apply_discount(amount, initial_amount, discount_type, discount)

    amount = apply_tax(amount, tax)
    if initial_amount is not None:
        initial_amount = apply_tax(initial_amount, tax)

    return NormalizedAmounts(amount=amortize(amount, cycles), initial_amount=initial_amount)


def normalize_installments(
    amount: Decimal,
    initial_amount: Decimal,
    discount_type: str,
    discount: Decimal,
    tax: Decimal,
    cycles: int,
) -> NormalizedAmounts:
    """
    Discount, tax and amortize an installment plan.

    Example:
        amount=120, initial=20, 10% off, no tax, 4 cycles
        → initial 18.00, remainder 90 → 22.50 per cycle
    """
    remainder, initial_amount = apply_installment_discount(amount, initial_amount, discount_type, discount)

    remainder = apply_tax(remainder, tax)
    initial_amount = apply_tax(initial_amount, tax)

    return NormalizedAmounts(amount=amortize(remainder, cycles), initial_amount=initial_amount)


def normalize_currency(currency: str) -> str:
    return currency.upper()


def resolve_frequency(frequency: str, custom_days: int) -> Tuple[str, int]:
    """Map a caller frequency to a PayPal frequency and interval"""
    if frequency == CUSTOM_FREQUENCY:
        return SMALLEST_FREQUENCY, custom_days
    return frequency.upper(), 1


def normalize_plan(plan: PlanRequest, kind: PlanKind) -> NormalizedAmounts:
    """
    Normalize a plan request in place for the given plan kind.

    Upper-cases the currency, resolves the billing frequency and replaces the
    monetary fields with their final values.
    """
    plan.currency = normalize_currency(plan.currency)

    if kind != PlanKind.ONE_TIME:
        plan.frequency, plan.frequency_interval = resolve_frequency(plan.frequency, plan.custom_days)

    if kind == PlanKind.INSTALLMENTS:
        amounts = normalize_installments(
            plan.amount,
            plan.initial_amount if plan.initial_amount is not None else ZERO,
            plan.discount_type,
            plan.discount,
            plan.tax,
            plan.cycles,
        )
    else:
        # Only fixed plans spread the total over their cycles
        cycles = plan.cycles if kind == PlanKind.FIXED_RECURRING else 0
        amounts = normalize(
            plan.amount,
            plan.initial_amount,
            plan.discount_type,
            plan.discount,
            plan.tax,
            cycles,
        )

    plan.amount = amounts.amount
    plan.initial_amount = amounts.initial_amount
    return amounts
