import pytest

from ..services.applicability import charge_applies, plan_eligible, resolve_insurance, tax_applies
from ..services.exceptions import (
    ConflictingMandatoryRules,
    IneligibleInsuranceSelection,
    UnresolvedInsuranceSelection,
)
from .factories import charge, ctx, plan, tax


class TestChargeApplicability:
    def test_disabled_rule_never_applies(self):
        assert not charge_applies(charge(amount="10", is_enabled=False), ctx())

    def test_cod_only(self):
        rule = charge(amount="30", apply_to="cod_only")
        assert charge_applies(rule, ctx(payment_method="cod"))
        assert not charge_applies(rule, ctx(payment_method="upi"))

    def test_online_only(self):
        rule = charge(amount="5", apply_to="online_only")
        assert charge_applies(rule, ctx(payment_method="card"))
        assert not charge_applies(rule, ctx(payment_method="cod"))

    def test_specific_payment_methods(self):
        rule = charge(amount="5", apply_to="specific_payment_methods", payment_methods=frozenset({"upi", "wallet"}))
        assert charge_applies(rule, ctx(payment_method="upi"))
        assert not charge_applies(rule, ctx(payment_method="card"))

    def test_conditional(self):
        rule = charge(
            amount="99",
            apply_to="conditional",
            conditions={"field": "zone", "op": "eq", "value": "E"},
        )
        assert charge_applies(rule, ctx(zone="E"))
        assert not charge_applies(rule, ctx(zone="A"))


class TestTaxApplicability:
    def test_conditions_gate_tax(self):
        rule = tax(conditions={"field": "state", "op": "ne", "value": "KA"})
        assert tax_applies(rule, ctx(state="MH"))
        assert not tax_applies(rule, ctx(state="KA"))

    def test_disabled_tax(self):
        assert not tax_applies(tax(is_enabled=False), ctx())


class TestPlanEligibility:
    def test_order_value_range_is_inclusive(self):
        p = plan(min_order_value="500", max_order_value="5000")
        assert plan_eligible(p, ctx("500"))
        assert plan_eligible(p, ctx("5000"))
        assert not plan_eligible(p, ctx("499.99"))
        assert not plan_eligible(p, ctx("5000.01"))

    def test_inactive_plan(self):
        assert not plan_eligible(plan(is_active=False), ctx())

    def test_plan_conditions(self):
        p = plan(conditions={"field": "has_electronics", "op": "eq", "value": True})
        assert plan_eligible(p, ctx(has_electronics=True))
        assert not plan_eligible(p, ctx())


class TestInsuranceResolution:
    """Choosing at most one insurance plan per order"""

    def test_no_eligible_plan(self):
        assert resolve_insurance([plan(min_order_value="5000")], ctx("1000")) is None

    def test_two_mandatory_plans_conflict(self):
        plans = [plan(id=1, is_mandatory=True), plan(id=2, name="Other", is_mandatory=True)]
        with pytest.raises(ConflictingMandatoryRules) as exc:
            resolve_insurance(plans, ctx())
        assert exc.value.rule_ids == [1, 2]

    def test_mandatory_plan_wins_over_selection(self):
        plans = [plan(id=1, is_mandatory=True), plan(id=2, name="Optional")]
        assert resolve_insurance(plans, ctx(selected_insurance_plan_id=2)).id == 1

    def test_selected_plan(self):
        plans = [plan(id=1), plan(id=2, name="Gold")]
        assert resolve_insurance(plans, ctx(selected_insurance_plan_id=2)).id == 2

    def test_selected_plan_must_be_eligible(self):
        plans = [plan(id=1), plan(id=2, name="Gold", min_order_value="5000")]
        with pytest.raises(IneligibleInsuranceSelection) as exc:
            resolve_insurance(plans, ctx("1000", selected_insurance_plan_id=2))
        assert exc.value.rule_ids == [2]

    def test_optional_plan_is_opt_in(self):
        assert resolve_insurance([plan(id=3)], ctx()) is None

    def test_single_optional_plan_applies_when_selected(self):
        assert resolve_insurance([plan(id=3)], ctx(selected_insurance_plan_id=3)).id == 3

    def test_ambiguous_selection(self):
        plans = [plan(id=1), plan(id=2, name="Gold")]
        with pytest.raises(UnresolvedInsuranceSelection) as exc:
            resolve_insurance(plans, ctx())
        assert exc.value.code == "unresolved_insurance_selection"
        assert exc.value.rule_ids == [1, 2]
