from decimal import Decimal

import pytest

from ..dataclasses import AdvancePayment
from ..services.amounts import (
    advance_payment_amount,
    charge_amount,
    coverage_amount,
    insurance_premium,
    select_tier,
    tax_amount,
)
from ..services.exceptions import EvaluationError, MissingRequiredField
from ..services.utils import finalize
from .factories import charge, plan, tax

TIERS = [
    {"threshold": "0", "value": "30"},
    {"threshold": "500", "value": "20"},
    {"threshold": "1000", "value": "0"},
]


class TestChargeAmounts:
    def test_fixed(self):
        assert charge_amount(charge(amount="49.00"), Decimal("1000")) == Decimal("49.00")

    def test_percentage(self):
        assert charge_amount(charge(type="percentage", percentage="5"), Decimal("1000")) == Decimal("50")

    def test_tier_boundary_is_inclusive(self):
        rule = charge(type="tiered", tiers=TIERS)
        assert charge_amount(rule, Decimal("500")) == Decimal("20")
        assert charge_amount(rule, Decimal("499.99")) == Decimal("30")
        assert charge_amount(rule, Decimal("1500")) == Decimal("0")

    def test_free_shipping_ladder(self):
        tiers = [
            {"threshold": 0, "value": 0},
            {"threshold": 500, "value": 20},
            {"threshold": 1000, "value": 40},
        ]
        rule = charge(code="SHIPPING", type="tiered", tiers=tiers)
        assert charge_amount(rule, Decimal("999")) == Decimal("20")
        assert charge_amount(rule, Decimal("1000")) == Decimal("40")
        assert charge_amount(rule, Decimal("499")) == Decimal("0")

    def test_below_smallest_threshold_is_zero(self):
        rule = charge(type="tiered", tiers=[{"threshold": "100", "value": "15"}])
        assert charge_amount(rule, Decimal("99")) == Decimal("0")

    def test_percentage_tier_value(self):
        rule = charge(type="tiered", tiers=[{"threshold": "0", "value": "2.5%"}])
        assert charge_amount(rule, Decimal("1000")) == Decimal("25")

    def test_select_tier_ignores_storage_order(self):
        rule = charge(type="tiered", tiers=list(reversed(TIERS)))
        assert select_tier(rule.tiers, Decimal("750")).value == Decimal("20")

    @pytest.mark.parametrize("rule, field", [
        (charge(id=7, type="fixed"), "amount"),
        (charge(id=7, type="percentage"), "percentage"),
        (charge(id=7, type="tiered"), "tiers"),
    ])
    def test_missing_type_field(self, rule, field):
        with pytest.raises(MissingRequiredField) as exc:
            charge_amount(rule, Decimal("100"))
        assert exc.value.field == field
        assert exc.value.rule_ids == [7]
        assert exc.value.as_dict()["code"] == "missing_required_field"

    def test_unknown_type(self):
        with pytest.raises(EvaluationError):
            charge_amount(charge(type="bogus"), Decimal("100"))


class TestTaxAmounts:
    def test_exclusive(self):
        assert tax_amount(tax(rate="18"), Decimal("1050")) == Decimal("189")

    def test_inclusive_extracts_embedded_tax(self):
        assert finalize(tax_amount(tax(rate="18", is_inclusive=True), Decimal("1180"))) == Decimal("180.00")


class TestInsuranceAmounts:
    def test_premium_raised_to_minimum(self):
        p = plan(premium_percentage="2", minimum_premium="100")
        assert insurance_premium(p, Decimal("1000")) == Decimal("100")

    def test_premium_capped_at_maximum(self):
        p = plan(premium_percentage="2", maximum_premium="150")
        assert insurance_premium(p, Decimal("10000")) == Decimal("150")

    def test_premium_within_bounds(self):
        p = plan(premium_percentage="2", minimum_premium="10", maximum_premium="100")
        assert insurance_premium(p, Decimal("1000")) == Decimal("20")

    def test_coverage_capped_by_max_order_value(self):
        p = plan(coverage_percentage="80", max_order_value="500")
        assert coverage_amount(p, Decimal("400")) == Decimal("320")
        assert coverage_amount(plan(coverage_percentage="100", max_order_value="500"), Decimal("500")) == Decimal("500")

    def test_coverage_without_cap(self):
        assert coverage_amount(plan(coverage_percentage="80"), Decimal("1000")) == Decimal("800")


class TestAdvancePaymentAmounts:
    def test_percentage_and_fixed(self):
        pct = charge(apply_to="cod_only", advance_payment=AdvancePayment("percentage", Decimal("25")))
        fixed = charge(apply_to="cod_only", advance_payment=AdvancePayment("fixed", Decimal("150")))
        assert advance_payment_amount(pct, Decimal("1000")) == Decimal("250")
        assert advance_payment_amount(fixed, Decimal("1000")) == Decimal("150")
        assert advance_payment_amount(fixed, Decimal("100")) == Decimal("100")

    def test_unknown_type(self):
        rule = charge(id=4, apply_to="cod_only", advance_payment=AdvancePayment("weekly", Decimal("1")))
        with pytest.raises(EvaluationError) as exc:
            advance_payment_amount(rule, Decimal("1000"))
        assert exc.value.rule_ids == [4]
