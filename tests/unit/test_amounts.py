"""Unit tests for discount, tax and amortization arithmetic"""

import pytest
from decimal import Decimal
from paypal_plans.domain.amounts import (
    amortize,
    apply_discount,
    apply_tax,
    installment_discount_percentage,
    normalize,
    normalize_installments,
    normalize_plan,
    resolve_frequency,
)
from paypal_plans.domain.models import PlanKind, PlanRequest


def D(value) -> Decimal:
    return Decimal(str(value))


def test_percentage_discount():
    """10% off 100 with no tax leaves 90"""
    result = normalize(D(100), None, "percentage", D(10), D(0), 0)
    assert result.amount == D(90)
    assert result.initial_amount is None


@pytest.mark.parametrize("discount", [100, 100.01, 250])
def test_flat_discount_floors_at_zero(discount):
    """A flat discount at or above the amount collapses it to zero, never negative"""
    result = normalize(D(100), None, "flat", D(discount), D(0), 0)
    assert result.amount == 0


def test_full_percentage_discount_is_zero():
    result = normalize(D("49.99"), None, "percentage", D(100), D(0), 0)
    assert result.amount == 0


def test_flat_discount_taken_in_full_from_each_field():
    """Flat value is not pro-rated between amount and initial amount"""
    amount, initial = apply_discount(D(100), D(20), "flat", D(30))
    assert amount == D(70)
    assert initial == 0  # 20 - 30 floors at zero


def test_percentage_discount_applies_to_initial_amount():
    amount, initial = apply_discount(D(100), D(40), "percentage", D(25))
    assert amount == D(75)
    assert initial == D(30)


def test_discount_rounds_to_one_decimal():
    """9.99 less 5% is 9.4905, rounded to 9.5"""
    amount, _ = apply_discount(D("9.99"), None, "percentage", D(5))
    assert amount == D("9.5")


def test_zero_discount_leaves_amounts_untouched():
    assert apply_discount(D("19.99"), D("5.55"), "flat", D(0)) == (D("19.99"), D("5.55"))


def test_zero_tax_is_identity():
    assert apply_tax(D("57.35"), D(0)) == D("57.35")
    assert normalize(D("57.35"), None, "flat", D(0), D(0), 0).amount == D("57.35")


def test_tax_added_after_discount():
    """(100 - 10%) + 10% tax = 99.00"""
    result = normalize(D(100), None, "percentage", D(10), D(10), 0)
    assert result.amount == D("99.00")


def test_tax_applied_independently_to_initial_amount():
    result = normalize(D(50), D(10), "flat", D(0), D("7.5"), 0)
    assert result.amount == D("53.75")
    assert result.initial_amount == D("10.75")


def test_tax_rounds_to_cents():
    assert apply_tax(D("33.33"), D("8.25")) == D("36.08")  # 36.0797...


def test_cycles_amortize_total():
    """120 + 10% tax over 4 cycles is 33.00 per cycle"""
    result = normalize(D(120), None, "flat", D(0), D(10), 4)
    assert result.amount == D("33.00")


@pytest.mark.parametrize("cycles", [2, 3, 7, 12])
def test_per_cycle_amount_matches_total_divided_by_cycles(cycles):
    total = normalize(D("199.99"), None, "percentage", D(15), D(8), 0).amount
    per_cycle = normalize(D("199.99"), None, "percentage", D(15), D(8), cycles).amount
    assert per_cycle == (total / cycles).quantize(D("0.01"))


def test_zero_cycles_do_not_divide():
    assert amortize(D(120), 0) == D(120)


def test_installment_flat_discount_as_percentage():
    assert installment_discount_percentage(D(120), "flat", D(12)) == D(10)
    assert installment_discount_percentage(D(120), "percentage", D(12)) == D(12)
    assert installment_discount_percentage(D(120), "flat", D(0)) == 0


def test_installment_percentage_discount():
    """initial 20 → 18.00, remainder 100 → 90 → 22.50 per cycle"""
    result = normalize_installments(D(120), D(20), "percentage", D(10), D(0), 4)
    assert result.initial_amount == D("18.00")
    assert result.amount == D("22.50")


def test_installment_flat_discount_matches_equivalent_percentage():
    flat = normalize_installments(D(120), D(20), "flat", D(12), D(5), 4)
    percentage = normalize_installments(D(120), D(20), "percentage", D(12) / D(120) * 100, D(5), 4)
    assert flat == percentage


def test_installment_full_flat_discount_collapses_everything():
    result = normalize_installments(D(100), D(20), "flat", D(100), D(0), 4)
    assert result.initial_amount == 0
    assert result.amount == 0


def test_installment_discount_has_no_floor():
    """Unlike the flat path, an oversized installment discount goes negative"""
    result = normalize_installments(D(100), D(20), "flat", D(150), D(0), 4)
    assert result.initial_amount == D("-10.00")
    assert result.amount == D("-10.00")


def test_installment_tax_applied_to_both_parts():
    result = normalize_installments(D(120), D(20), "percentage", D(10), D(10), 4)
    assert result.initial_amount == D("19.80")
    assert result.amount == D("24.75")


def test_installment_without_discount_splits_remainder():
    result = normalize_installments(D(120), D(20), "flat", D(0), D(0), 4)
    assert result.initial_amount == D("20.00")
    assert result.amount == D("25.00")


def test_installment_and_flat_paths_differ():
    """Same nominal inputs, different plan kinds, different results"""
    installment = normalize_installments(D(100), D(20), "flat", D(10), D(0), 0)
    flat = normalize(D(100), D(20), "flat", D(10), D(0), 0)
    assert installment.initial_amount == D("18.00")
    assert flat.initial_amount == D(10)


def test_resolve_frequency():
    assert resolve_frequency("custom", 10) == ("DAY", 10)
    assert resolve_frequency("month", 3) == ("MONTH", 1)
    assert resolve_frequency("week", 1) == ("WEEK", 1)


@pytest.mark.parametrize("currency", ["usd", "Usd", "uSD", "USD"])
def test_normalize_plan_upper_cases_currency(currency):
    plan = PlanRequest(amount=D(10), currency=currency, return_url="https://x.test")
    normalize_plan(plan, PlanKind.ONE_TIME)
    assert plan.currency == "USD"


def test_normalize_plan_recurring_ignores_cycles():
    plan = PlanRequest(amount=D(30), currency="eur", return_url="https://x.test", cycles=6)
    normalize_plan(plan, PlanKind.RECURRING)
    assert plan.amount == D(30)
    assert plan.frequency == "MONTH"


def test_normalize_plan_fixed_amortizes_and_resolves_custom_frequency():
    plan = PlanRequest(
        amount=D(90),
        currency="usd",
        return_url="https://x.test",
        cycles=3,
        frequency="custom",
        custom_days=10,
    )
    amounts = normalize_plan(plan, PlanKind.FIXED_RECURRING)
    assert plan.amount == amounts.amount == D("30.00")
    assert (plan.frequency, plan.frequency_interval) == ("DAY", 10)


def test_normalize_plan_installments_mutates_initial_amount():
    plan = PlanRequest(
        amount=D(120),
        initial_amount=D(20),
        currency="usd",
        return_url="https://x.test",
        discount_type="percentage",
        discount=D(10),
        cycles=4,
    )
    normalize_plan(plan, PlanKind.INSTALLMENTS)
    assert plan.initial_amount == D("18.00")
    assert plan.amount == D("22.50")
