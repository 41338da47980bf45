"""Builders for frozen rule objects used across the pricing tests."""
from decimal import Decimal

from ..dataclasses import ChargeRule, InsurancePlan, OrderContext, RuleSnapshot, TaxRule, Tier
from ..services.conditions import parse_condition


def ctx(subtotal="1000", **kw):
    return OrderContext(subtotal=Decimal(str(subtotal)), **kw)


def tax(id=1, code="GST", rate="18", apply_on="subtotal", priority=0, conditions=None, **kw):
    return TaxRule(
        id=id,
        code=code,
        name=code,
        rate=Decimal(rate),
        apply_on=apply_on,
        priority=priority,
        conditions=parse_condition(conditions),
        **kw,
    )


def charge(id=1, code="FEE", type="fixed", amount=None, percentage=None, tiers=(), priority=0, conditions=None, **kw):
    return ChargeRule(
        id=id,
        code=code,
        name=code,
        type=type,
        fixed_amount=Decimal(amount) if amount is not None else None,
        percentage=Decimal(percentage) if percentage is not None else None,
        tiers=tuple(Tier.from_raw(t) for t in tiers),
        priority=priority,
        conditions=parse_condition(conditions),
        **kw,
    )


def plan(id=1, name="Basic", min_order_value="0", premium_percentage="2", conditions=None, **kw):
    for key in ("max_order_value", "coverage_percentage", "minimum_premium", "maximum_premium"):
        if key in kw and kw[key] is not None:
            kw[key] = Decimal(kw[key])
    return InsurancePlan(
        id=id,
        name=name,
        min_order_value=Decimal(min_order_value),
        premium_percentage=Decimal(premium_percentage),
        conditions=parse_condition(conditions),
        **kw,
    )


def snapshot(taxes=(), charges=(), plans=()):
    return RuleSnapshot.build(taxes, charges, plans)
