"""
Amount calculation for order cost rules.

Every function here returns an unrounded Decimal; rounding to the currency
minor unit happens once per component in the composition step.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from .exceptions import EvaluationError, MissingRequiredField
from .utils import HUNDRED, ZERO, d, percent_of

FIXED = "fixed"
PERCENTAGE = "percentage"
TIERED = "tiered"


def select_tier(tiers: Sequence, base: Decimal):
    """Return the tier with the greatest threshold not above ``base``.

    Thresholds are inclusive. Returns None when ``base`` is below every
    threshold.
    """
    chosen = None
    for tier in tiers:
        if tier.threshold <= base and (chosen is None or tier.threshold > chosen.threshold):
            chosen = tier
    return chosen


def tier_amount(tiers: Sequence, base: Decimal) -> Decimal:
    tier = select_tier(tiers, base)
    if tier is None:
        return ZERO
    if tier.is_percentage:
        return percent_of(base, tier.value)
    return tier.value


def charge_amount(rule, base: Decimal) -> Decimal:
    """
    Compute the amount of a charge rule against ``base``.

    Args:
        rule: ChargeRule
        base: subtotal, or the discount-adjusted subtotal for charges with
            ``apply_after_discount``

    Returns:
        Decimal: unrounded charge amount

    Raises:
        MissingRequiredField: the rule's type needs a field that is absent
    """
    base = d(base)
    if rule.type == FIXED:
        if rule.fixed_amount is None:
            raise MissingRequiredField(rule.id, "amount")
        return d(rule.fixed_amount)
    if rule.type == PERCENTAGE:
        if rule.percentage is None:
            raise MissingRequiredField(rule.id, "percentage")
        return percent_of(base, rule.percentage)
    if rule.type == TIERED:
        if not rule.tiers:
            raise MissingRequiredField(rule.id, "tiers")
        return tier_amount(rule.tiers, base)
    raise EvaluationError(f"Unsupported charge type '{rule.type}'", [rule.id])


def advance_payment_amount(rule, order_total: Decimal) -> Decimal:
    """Up-front share of a cash-on-delivery order, never more than the order total."""
    order_total = d(order_total)
    config = rule.advance_payment
    if config.type == PERCENTAGE:
        amount = percent_of(order_total, config.value)
    elif config.type == FIXED:
        amount = d(config.value)
    else:
        raise EvaluationError(f"Unsupported advance payment type '{config.type}'", [rule.id])
    return min(amount, order_total)


def tax_amount(rule, base: Decimal) -> Decimal:
    """Exclusive: base * rate / 100. Inclusive: the tax portion already inside base."""
    base = d(base)
    rate = d(rule.rate)
    if rule.is_inclusive:
        return base - base / (1 + rate / HUNDRED)
    return percent_of(base, rate)


def clamp(amount: Decimal, lower: Optional[Decimal], upper: Optional[Decimal]) -> Decimal:
    if lower is not None and amount < lower:
        amount = d(lower)
    if upper is not None and amount > upper:
        amount = d(upper)
    return amount


def insurance_premium(plan, order_value: Decimal, context=None, surcharge_policy=None) -> Decimal:
    """
    Premium for an insurance plan.

    The percentage premium is clamped to ``[minimum_premium, maximum_premium]``
    first; the surcharge policy, when given, adjusts the clamped value.
    """
    raw = percent_of(order_value, plan.premium_percentage)
    premium = clamp(raw, plan.minimum_premium, plan.maximum_premium)
    if surcharge_policy is not None:
        premium = surcharge_policy.apply(plan, premium, d(order_value), context)
    return premium


def coverage_amount(plan, order_value: Decimal) -> Decimal:
    order_value = d(order_value)
    coverage = percent_of(order_value, plan.coverage_percentage)
    cap = plan.max_order_value if plan.max_order_value is not None else order_value
    return min(coverage, d(cap))
