"""
End-to-end composition of cost breakdowns from in-memory rule snapshots.
"""
from decimal import Decimal

import pytest

from ..dataclasses import AdvancePayment
from ..services.composition import evaluate
from ..services.exceptions import ConflictingMandatoryRules, MissingRequiredField
from ..services.surcharges import ScheduleSurcharge
from .factories import charge, ctx, plan, snapshot, tax


class TestEvaluate:
    def test_taxable_charge_feeds_tax_base(self):
        snap = snapshot(
            taxes=[tax(rate="18", apply_on="subtotal_with_charges")],
            charges=[charge(code="HANDLING", type="percentage", percentage="5", is_taxable=True)],
        )
        result = evaluate(ctx("1000"), snap)

        assert [c.amount for c in result.charges] == [Decimal("50.00")]
        assert result.taxes[0].taxable_amount == Decimal("1050.00")
        assert result.taxes[0].amount == Decimal("189.00")
        assert result.grand_total == Decimal("1239.00")

    def test_non_taxable_charge_stays_out_of_tax_base(self):
        snap = snapshot(
            taxes=[tax(rate="18", apply_on="subtotal_with_charges")],
            charges=[charge(code="HANDLING", amount="50")],
        )
        result = evaluate(ctx("1000"), snap)
        assert result.taxes[0].amount == Decimal("180.00")
        assert result.grand_total == Decimal("1230.00")

    def test_tiered_charge(self):
        tiers = [{"threshold": "0", "value": "30"}, {"threshold": "500", "value": "20"}]
        result = evaluate(ctx("500"), snapshot(charges=[charge(code="SHIPPING", type="tiered", tiers=tiers)]))
        assert result.charges[0].amount == Decimal("20.00")
        assert result.grand_total == Decimal("520.00")

    def test_zero_charge_is_omitted(self):
        tiers = [{"threshold": "100", "value": "30"}]
        result = evaluate(ctx("50"), snapshot(charges=[charge(type="tiered", tiers=tiers)]))
        assert result.charges == ()
        assert result.grand_total == Decimal("50.00")

    def test_inclusive_tax_is_reported_not_added(self):
        result = evaluate(ctx("1180"), snapshot(taxes=[tax(rate="18", is_inclusive=True)]))
        assert result.taxes[0].amount == Decimal("180.00")
        assert result.taxes[0].inclusive is True
        assert result.grand_total == Decimal("1180.00")

    def test_shipping_base_uses_configured_codes(self, settings):
        settings.PRICING_SHIPPING_CHARGE_CODES = ["SHIPPING"]
        snap = snapshot(
            taxes=[tax(rate="10", apply_on="subtotal_with_shipping")],
            charges=[
                charge(id=1, code="SHIPPING", amount="50"),
                charge(id=2, code="GIFT_WRAP", amount="25"),
            ],
        )
        result = evaluate(ctx("1000"), snap)
        assert result.taxes[0].taxable_amount == Decimal("1050.00")
        assert result.taxes[0].amount == Decimal("105.00")

    def test_apply_after_discount_uses_discounted_subtotal(self):
        snap = snapshot(charges=[
            charge(id=1, code="AFTER", type="percentage", percentage="10", apply_after_discount=True),
            charge(id=2, code="BEFORE", type="percentage", percentage="10", apply_after_discount=False),
        ])
        result = evaluate(ctx("1000", discounted_subtotal=Decimal("800")), snap)
        amounts = {c.code: c.amount for c in result.charges}
        assert amounts == {"AFTER": Decimal("80.00"), "BEFORE": Decimal("100.00")}

    def test_rules_follow_priority_then_id(self):
        snap = snapshot(charges=[
            charge(id=3, code="C", amount="1", priority=1),
            charge(id=2, code="B", amount="1", priority=0),
            charge(id=1, code="A", amount="1", priority=1),
        ])
        result = evaluate(ctx("100"), snap)
        assert [c.code for c in result.charges] == ["B", "A", "C"]

    def test_payment_method_gates_charges(self):
        snap = snapshot(charges=[
            charge(id=1, code="COD_FEE", amount="30", apply_to="cod_only"),
            charge(id=2, code="GATEWAY", type="percentage", percentage="2", apply_to="online_only"),
        ])
        cod = evaluate(ctx("1000", payment_method="cod"), snap)
        online = evaluate(ctx("1000", payment_method="card"), snap)
        assert [c.code for c in cod.charges] == ["COD_FEE"]
        assert [c.code for c in online.charges] == ["GATEWAY"]

    def test_insurance_premium_is_added_but_not_taxed(self):
        snap = snapshot(
            taxes=[tax(rate="18", apply_on="subtotal_with_charges")],
            plans=[plan(premium_percentage="2", minimum_premium="100", coverage_percentage="100")],
        )
        result = evaluate(ctx("1000", selected_insurance_plan_id=1), snap)
        assert result.insurance.premium == Decimal("100.00")
        assert result.insurance.coverage_amount == Decimal("1000.00")
        assert result.taxes[0].taxable_amount == Decimal("1000.00")
        assert result.grand_total == Decimal("1280.00")

    def test_insurance_premium_uses_surcharge_policy(self):
        snap = snapshot(plans=[plan(
            premium_percentage="2",
            surcharge_schedule=({"type": "remote_surcharge", "amount": "50"},),
        )])
        order = ctx("1000", is_remote=True, selected_insurance_plan_id=1)
        plain = evaluate(order, snap)
        surcharged = evaluate(order, snap, surcharge_policy=ScheduleSurcharge())
        assert plain.insurance.premium == Decimal("20.00")
        assert surcharged.insurance.premium == Decimal("70.00")

    def test_optional_insurance_is_opt_in(self):
        snap = snapshot(
            taxes=[tax(rate="18")],
            plans=[plan(premium_percentage="2", minimum_premium="100")],
        )
        result = evaluate(ctx("1000"), snap)
        assert result.insurance is None
        assert result.grand_total == Decimal("1180.00")

    def test_taxes_use_discounted_subtotal(self):
        snap = snapshot(
            taxes=[
                tax(id=1, code="GST", rate="18"),
                tax(id=2, code="CESS", rate="10", apply_on="subtotal_with_charges"),
            ],
            charges=[charge(code="HANDLING", amount="50", is_taxable=True)],
        )
        result = evaluate(ctx("1000", discounted_subtotal=Decimal("800")), snap)
        lines = {t.code: t for t in result.taxes}

        assert lines["GST"].taxable_amount == Decimal("800.00")
        assert lines["GST"].amount == Decimal("144.00")
        assert lines["CESS"].taxable_amount == Decimal("850.00")
        assert lines["CESS"].amount == Decimal("85.00")
        assert result.grand_total == Decimal("1279.00")

    def test_taxes_fall_back_to_subtotal_without_discount(self):
        result = evaluate(ctx("1000"), snapshot(taxes=[tax(rate="18")]))
        assert result.taxes[0].taxable_amount == Decimal("1000.00")

    def test_evaluation_is_deterministic(self):
        taxes = [tax(id=2, code="B", rate="5"), tax(id=1, code="A", rate="5")]
        charges = [
            charge(id=3, code="Z", amount="10", priority=1),
            charge(id=2, code="Y", amount="10", priority=1),
            charge(id=1, code="X", amount="10", priority=1),
        ]
        order = ctx("1000", payment_method="cod", zone="A")

        first = evaluate(order, snapshot(taxes=taxes, charges=charges))
        second = evaluate(order, snapshot(taxes=taxes[::-1], charges=charges[::-1]))

        assert first == second
        assert first.to_dict() == second.to_dict()
        assert [c.code for c in first.charges] == ["X", "Y", "Z"]
        assert [t.code for t in first.taxes] == ["A", "B"]

    def test_each_component_rounds_half_up(self):
        snap = snapshot(charges=[charge(type="percentage", percentage="12.5")])
        result = evaluate(ctx("1.00"), snap)
        assert result.charges[0].amount == Decimal("0.13")
        assert result.grand_total == Decimal("1.13")

    def test_errors_are_terminal(self):
        snap = snapshot(
            charges=[charge(amount="10")],
            plans=[plan(id=1, is_mandatory=True), plan(id=2, name="B", is_mandatory=True)],
        )
        with pytest.raises(ConflictingMandatoryRules):
            evaluate(ctx(), snap)

    def test_missing_field_aborts_evaluation(self):
        with pytest.raises(MissingRequiredField):
            evaluate(ctx(), snapshot(charges=[charge(id=9, type="percentage")]))


def _cod_fee(id=1, advance=None, **kw):
    return charge(
        id=id,
        code=kw.pop("code", "COD_FEE"),
        amount=kw.pop("amount", "30"),
        apply_to="cod_only",
        advance_payment=AdvancePayment.from_raw(advance),
        **kw,
    )


class TestAdvancePayment:
    """Cash-on-delivery orders may owe part of the total up front"""

    def test_percentage_of_grand_total(self):
        snap = snapshot(charges=[_cod_fee(advance={"type": "percentage", "value": "20", "description": "Pay 20% now"})])
        result = evaluate(ctx("1000", payment_method="cod"), snap)

        assert result.grand_total == Decimal("1030.00")
        assert result.advance_payment.amount == Decimal("206.00")
        assert result.advance_payment.rule_id == 1
        assert result.advance_payment.description == "Pay 20% now"

    def test_fixed_amount_is_capped_at_total(self):
        fixed = evaluate(ctx("1000", payment_method="cod"), snapshot(charges=[_cod_fee(advance={"type": "fixed", "value": "100"})]))
        capped = evaluate(ctx("10", payment_method="cod"), snapshot(charges=[_cod_fee(advance={"type": "fixed", "value": "100"})]))

        assert fixed.advance_payment.amount == Decimal("100.00")
        assert capped.advance_payment.amount == Decimal("40.00")

    def test_only_for_cash_on_delivery(self):
        snap = snapshot(charges=[_cod_fee(advance={"type": "percentage", "value": "20"})])
        result = evaluate(ctx("1000", payment_method="card"), snap)
        assert result.advance_payment is None

    def test_not_required_means_none(self):
        snap = snapshot(charges=[_cod_fee(advance={"required": False, "type": "fixed", "value": "100"})])
        assert evaluate(ctx("1000", payment_method="cod"), snap).advance_payment is None

    def test_last_config_wins_even_for_zero_charge(self):
        snap = snapshot(charges=[
            _cod_fee(id=1, advance={"type": "fixed", "value": "50"}),
            _cod_fee(id=2, code="COD_DEPOSIT", amount="0", advance={"type": "fixed", "value": "75"}),
        ])
        result = evaluate(ctx("1000", payment_method="cod"), snap)

        assert [c.code for c in result.charges] == ["COD_FEE"]
        assert result.advance_payment.rule_id == 2
        assert result.advance_payment.amount == Decimal("75.00")


class TestBreakdownDict:
    def test_to_dict_uses_string_decimals(self, settings):
        settings.PRICING_CURRENCY = "INR"
        snap = snapshot(
            taxes=[tax(rate="18", apply_on="subtotal_with_charges")],
            charges=[charge(code="HANDLING", type="percentage", percentage="5", is_taxable=True)],
        )
        data = evaluate(ctx("1000"), snap).to_dict()

        assert data["currency"] == "INR"
        assert data["subtotal"] == "1000.00"
        assert data["charges"][0]["amount"] == "50.00"
        assert data["taxes"][0]["amount"] == "189.00"
        assert data["total_tax"] == "189.00"
        assert data["insurance"] is None
        assert data["grand_total"] == "1239.00"
        assert data["advance_payment"] is None

    def test_to_dict_reports_advance_payment(self):
        snap = snapshot(charges=[_cod_fee(advance={"type": "percentage", "value": "10"})])
        data = evaluate(ctx("1000", payment_method="cod"), snap).to_dict()
        assert data["advance_payment"] == {
            "rule_id": 1,
            "type": "percentage",
            "value": "10",
            "amount": "103.00",
            "description": "",
        }
