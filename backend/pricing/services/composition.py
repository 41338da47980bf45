"""
Composition of an order cost breakdown from a rule snapshot.

Order of work:
  1. charges, in (priority, id) order
  2. insurance plan resolution and premium
  3. taxes, in (priority, id) order, on the base each tax names; bases start
     from the discount-adjusted subtotal when one is supplied
  4. grand total = subtotal + charges + exclusive taxes + premium
  5. advance payment owed up front on cash-on-delivery orders

Each component is rounded once to the currency minor unit; accumulators and
totals are built from the rounded components.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from django.conf import settings

from ..dataclasses import (
    AdvancePaymentLine,
    Breakdown,
    ChargeLine,
    InsuranceLine,
    OrderContext,
    RuleSnapshot,
    TaxLine,
    priority_key,
)
from .amounts import advance_payment_amount, coverage_amount
from .applicability import APPLY_COD_ONLY, COD, resolve_insurance
from .exceptions import EvaluationError
from .utils import ZERO, d, finalize

logger = logging.getLogger(__name__)

BASE_SUBTOTAL = "subtotal"
BASE_WITH_CHARGES = "subtotal_with_charges"
BASE_WITH_SHIPPING = "subtotal_with_shipping"


def _shipping_codes():
    return set(getattr(settings, "PRICING_SHIPPING_CHARGE_CODES", ["SHIPPING"]))


def evaluate(
    context: OrderContext,
    snapshot: RuleSnapshot,
    surcharge_policy=None,
    currency: Optional[str] = None,
) -> Breakdown:
    """
    Compute the full cost breakdown for an order.

    Args:
        context: order facts
        snapshot: rules read once for this evaluation
        surcharge_policy: optional premium adjustment policy
        currency: currency code reported on the breakdown

    Returns:
        Breakdown

    Raises:
        EvaluationError: insurance resolution failed or a stored rule is
            missing a field its type requires
    """
    subtotal = d(context.subtotal)
    if subtotal < 0:
        raise EvaluationError("Subtotal cannot be negative")
    discount_base = context.discount_base

    # 1. charges
    charges: List[ChargeLine] = []
    taxable_charges = ZERO
    shipping = ZERO
    shipping_codes = _shipping_codes()
    advance_rule = None
    for rule in sorted(snapshot.charges, key=priority_key):
        if not rule.applies(context):
            continue
        if rule.apply_to == APPLY_COD_ONLY and context.payment_method == COD and rule.advance_payment:
            # last applicable config wins
            advance_rule = rule
        base = discount_base if rule.apply_after_discount else subtotal
        amount = finalize(rule.amount(context, base))
        if amount <= 0:
            continue
        charges.append(ChargeLine(
            rule_id=rule.id,
            code=rule.code,
            label=rule.label,
            amount=amount,
            is_taxable=rule.is_taxable,
        ))
        if rule.is_taxable:
            taxable_charges += amount
        if rule.code in shipping_codes:
            shipping += amount

    # 2. insurance
    insurance = None
    plan = resolve_insurance(snapshot.insurance_plans, context)
    if plan is not None:
        insurance = InsuranceLine(
            plan_id=plan.id,
            plan_code=plan.code,
            premium=finalize(plan.amount(context, subtotal, surcharge_policy)),
            coverage_amount=finalize(coverage_amount(plan, subtotal)),
            is_mandatory=plan.is_mandatory,
            claim_processing_days=plan.claim_processing_days,
        )

    # 3. taxes
    bases = {
        BASE_SUBTOTAL: discount_base,
        BASE_WITH_CHARGES: discount_base + taxable_charges,
        BASE_WITH_SHIPPING: discount_base + shipping,
    }
    taxes: List[TaxLine] = []
    for rule in sorted(snapshot.taxes, key=priority_key):
        if not rule.applies(context):
            continue
        if rule.apply_on not in bases:
            raise EvaluationError(f"Tax {rule.code} has unknown base '{rule.apply_on}'", [rule.id])
        base = bases[rule.apply_on]
        if base <= 0:
            continue
        taxes.append(TaxLine(
            rule_id=rule.id,
            code=rule.code,
            label=rule.label,
            rate=rule.rate,
            amount=finalize(rule.amount(context, base)),
            taxable_amount=finalize(base),
            inclusive=rule.is_inclusive,
        ))

    # 4. total
    grand_total = subtotal
    grand_total += sum((c.amount for c in charges), ZERO)
    grand_total += sum((t.amount for t in taxes if not t.inclusive), ZERO)
    if insurance is not None:
        grand_total += insurance.premium
    grand_total = finalize(grand_total)

    # 5. advance payment
    advance_payment = None
    if advance_rule is not None:
        config = advance_rule.advance_payment
        advance_payment = AdvancePaymentLine(
            rule_id=advance_rule.id,
            type=config.type,
            value=config.value,
            amount=finalize(advance_payment_amount(advance_rule, grand_total)),
            description=config.description,
        )

    breakdown = Breakdown(
        subtotal=finalize(subtotal),
        charges=tuple(charges),
        insurance=insurance,
        taxes=tuple(taxes),
        grand_total=grand_total,
        currency=currency or getattr(settings, "PRICING_CURRENCY", ""),
        advance_payment=advance_payment,
    )
    logger.debug(
        "Evaluated order: subtotal=%s charges=%d taxes=%d insurance=%s total=%s",
        breakdown.subtotal, len(charges), len(taxes),
        insurance.plan_code if insurance else None, breakdown.grand_total,
    )
    return breakdown
