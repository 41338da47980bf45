from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from .services import amounts, applicability
from .services.conditions import Condition, parse_condition
from .services.utils import ZERO, d, d_or_none


@dataclass(frozen=True)
class OrderContext:
    subtotal: Decimal
    payment_method: Optional[str] = None
    zone: Optional[str] = None
    is_remote: bool = False
    has_fragile_items: bool = False
    has_electronics: bool = False
    selected_insurance_plan_id: Optional[int] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    categories: Tuple[str, ...] = ()
    # Discount-adjusted base supplied by the discount subsystem, if any
    discounted_subtotal: Optional[Decimal] = None

    @property
    def order_value(self) -> Decimal:
        return d(self.subtotal)

    @property
    def discount_base(self) -> Decimal:
        if self.discounted_subtotal is None:
            return d(self.subtotal)
        return d(self.discounted_subtotal)


class AdjustmentRule(Protocol):
    """Capability set shared by tax, charge and insurance rules."""

    id: int

    def applies(self, context: OrderContext) -> bool: ...

    def amount(self, context: OrderContext, base: Decimal) -> Decimal: ...


@dataclass(frozen=True)
class Tier:
    threshold: Decimal
    value: Decimal
    is_percentage: bool = False

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Tier":
        value = raw["value"]
        if isinstance(value, str) and value.strip().endswith("%"):
            return cls(d(raw["threshold"]), d(value.strip()[:-1]), True)
        return cls(d(raw["threshold"]), d(value))


@dataclass(frozen=True)
class TaxRule:
    id: int
    code: str
    name: str
    rate: Decimal
    tax_type: str = "custom"
    apply_on: str = "subtotal"
    is_inclusive: bool = False
    is_enabled: bool = True
    priority: int = 0
    display_label: str = ""
    conditions: Optional[Condition] = None

    @property
    def label(self) -> str:
        return self.display_label or self.name

    def applies(self, context: OrderContext) -> bool:
        return applicability.tax_applies(self, context)

    def amount(self, context: OrderContext, base: Decimal) -> Decimal:
        return amounts.tax_amount(self, base)

    @classmethod
    def from_model(cls, obj) -> "TaxRule":
        return cls(
            id=obj.id,
            code=obj.code,
            name=obj.name,
            rate=d(obj.rate),
            tax_type=obj.tax_type,
            apply_on=obj.apply_on,
            is_inclusive=obj.is_inclusive,
            is_enabled=obj.is_enabled,
            priority=obj.priority,
            display_label=obj.display_label or "",
            conditions=parse_condition(obj.conditions),
        )


@dataclass(frozen=True)
class AdvancePayment:
    """Part of a cash-on-delivery order collected up front."""

    type: str
    value: Decimal
    description: str = ""

    @classmethod
    def from_raw(cls, raw: Optional[Mapping[str, Any]]) -> Optional["AdvancePayment"]:
        if not raw or not raw.get("required", True):
            return None
        return cls(
            type=raw.get("type", "percentage"),
            value=d(raw.get("value", 0)),
            description=raw.get("description") or "",
        )


@dataclass(frozen=True)
class ChargeRule:
    id: int
    code: str
    name: str
    type: str
    # Model field `amount`; renamed so it does not shadow the amount() capability
    fixed_amount: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    tiers: Tuple[Tier, ...] = ()
    is_enabled: bool = True
    apply_to: str = "all"
    payment_methods: frozenset = frozenset()
    conditions: Optional[Condition] = None
    priority: int = 0
    is_taxable: bool = False
    apply_after_discount: bool = False
    is_refundable: bool = False
    display_label: str = ""
    advance_payment: Optional[AdvancePayment] = None

    @property
    def label(self) -> str:
        return self.display_label or self.name

    def applies(self, context: OrderContext) -> bool:
        return applicability.charge_applies(self, context)

    def amount(self, context: OrderContext, base: Decimal) -> Decimal:
        return amounts.charge_amount(self, base)

    @classmethod
    def from_model(cls, obj) -> "ChargeRule":
        return cls(
            id=obj.id,
            code=obj.code,
            name=obj.name,
            type=obj.type,
            fixed_amount=d_or_none(obj.amount),
            percentage=d_or_none(obj.percentage),
            tiers=tuple(Tier.from_raw(t) for t in (obj.tiers or [])),
            is_enabled=obj.is_enabled,
            apply_to=obj.apply_to,
            payment_methods=frozenset(obj.payment_methods or []),
            conditions=parse_condition(obj.conditions),
            priority=obj.priority,
            is_taxable=obj.is_taxable,
            apply_after_discount=obj.apply_after_discount,
            is_refundable=obj.is_refundable,
            display_label=obj.display_label or "",
            advance_payment=AdvancePayment.from_raw(obj.advance_payment),
        )


@dataclass(frozen=True)
class InsurancePlan:
    id: int
    name: str
    min_order_value: Decimal
    premium_percentage: Decimal
    max_order_value: Optional[Decimal] = None
    coverage_percentage: Decimal = Decimal("100")
    minimum_premium: Decimal = ZERO
    maximum_premium: Optional[Decimal] = None
    is_mandatory: bool = False
    is_active: bool = True
    claim_processing_days: int = 7
    conditions: Optional[Condition] = None
    surcharge_schedule: Tuple[Mapping[str, Any], ...] = ()

    @property
    def code(self) -> str:
        return self.name

    def applies(self, context: OrderContext) -> bool:
        return applicability.plan_eligible(self, context)

    def amount(self, context: OrderContext, base: Decimal, surcharge_policy=None) -> Decimal:
        return amounts.insurance_premium(self, base, context, surcharge_policy)

    @classmethod
    def from_model(cls, obj) -> "InsurancePlan":
        return cls(
            id=obj.id,
            name=obj.name,
            min_order_value=d(obj.min_order_value),
            premium_percentage=d(obj.premium_percentage),
            max_order_value=d_or_none(obj.max_order_value),
            coverage_percentage=d(obj.coverage_percentage),
            minimum_premium=d(obj.minimum_premium),
            maximum_premium=d_or_none(obj.maximum_premium),
            is_mandatory=obj.is_mandatory,
            is_active=obj.is_active,
            claim_processing_days=obj.claim_processing_days,
            conditions=parse_condition(obj.conditions),
            surcharge_schedule=tuple(obj.surcharge_schedule or []),
        )


def priority_key(rule) -> Tuple[int, int]:
    return (rule.priority, rule.id)


@dataclass(frozen=True)
class RuleSnapshot:
    """Immutable rule set read once per evaluation."""

    taxes: Tuple[TaxRule, ...] = ()
    charges: Tuple[ChargeRule, ...] = ()
    insurance_plans: Tuple[InsurancePlan, ...] = ()

    @classmethod
    def build(cls, taxes=(), charges=(), insurance_plans=()) -> "RuleSnapshot":
        return cls(
            taxes=tuple(sorted(taxes, key=priority_key)),
            charges=tuple(sorted(charges, key=priority_key)),
            insurance_plans=tuple(sorted(insurance_plans, key=lambda p: (p.min_order_value, p.id))),
        )


# ---------------------------- Breakdown ----------------------------

@dataclass(frozen=True)
class ChargeLine:
    rule_id: int
    code: str
    label: str
    amount: Decimal
    is_taxable: bool = False


@dataclass(frozen=True)
class TaxLine:
    rule_id: int
    code: str
    label: str
    rate: Decimal
    amount: Decimal
    taxable_amount: Decimal
    inclusive: bool = False


@dataclass(frozen=True)
class InsuranceLine:
    plan_id: int
    plan_code: str
    premium: Decimal
    coverage_amount: Decimal
    is_mandatory: bool = False
    claim_processing_days: Optional[int] = None


@dataclass(frozen=True)
class AdvancePaymentLine:
    rule_id: int
    type: str
    value: Decimal
    amount: Decimal
    description: str = ""


@dataclass(frozen=True)
class Breakdown:
    subtotal: Decimal
    charges: Tuple[ChargeLine, ...]
    insurance: Optional[InsuranceLine]
    taxes: Tuple[TaxLine, ...]
    grand_total: Decimal
    currency: str = ""
    advance_payment: Optional[AdvancePaymentLine] = None

    @property
    def total_charges(self) -> Decimal:
        return sum((c.amount for c in self.charges), ZERO)

    @property
    def total_tax(self) -> Decimal:
        """Taxes added on top of the subtotal (inclusive taxes excluded)."""
        return sum((t.amount for t in self.taxes if not t.inclusive), ZERO)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready projection with decimals as strings."""
        charges: List[Dict[str, Any]] = [
            {
                "rule_id": c.rule_id,
                "code": c.code,
                "label": c.label,
                "amount": str(c.amount),
                "is_taxable": c.is_taxable,
            }
            for c in self.charges
        ]
        taxes: List[Dict[str, Any]] = [
            {
                "rule_id": t.rule_id,
                "code": t.code,
                "label": t.label,
                "rate": str(t.rate),
                "amount": str(t.amount),
                "taxable_amount": str(t.taxable_amount),
                "inclusive": t.inclusive,
            }
            for t in self.taxes
        ]
        insurance = None
        if self.insurance is not None:
            insurance = {
                "plan_id": self.insurance.plan_id,
                "plan_code": self.insurance.plan_code,
                "premium": str(self.insurance.premium),
                "coverage_amount": str(self.insurance.coverage_amount),
                "is_mandatory": self.insurance.is_mandatory,
                "claim_processing_days": self.insurance.claim_processing_days,
            }
        advance_payment = None
        if self.advance_payment is not None:
            advance_payment = {
                "rule_id": self.advance_payment.rule_id,
                "type": self.advance_payment.type,
                "value": str(self.advance_payment.value),
                "amount": str(self.advance_payment.amount),
                "description": self.advance_payment.description,
            }
        return {
            "currency": self.currency,
            "subtotal": str(self.subtotal),
            "charges": charges,
            "insurance": insurance,
            "taxes": taxes,
            "total_charges": str(self.total_charges),
            "total_tax": str(self.total_tax),
            "grand_total": str(self.grand_total),
            "advance_payment": advance_payment,
        }
