from __future__ import annotations

from decimal import InvalidOperation

from rest_framework import serializers

from .dataclasses import OrderContext
from .models import OrderCharge, ShippingInsurance, TaxConfiguration
from .services.conditions import parse_condition
from .services.exceptions import ConditionError
from .services.surcharges import validate_schedule
from .services.utils import d

INSURANCE_CONDITION_FIELDS = ("zone", "is_remote", "has_fragile_items", "has_electronics")


def _validate_conditions(value, allowed_fields=None):
    try:
        parse_condition(value, allowed_fields)
    except ConditionError as exc:
        raise serializers.ValidationError(str(exc))
    return value or None


def _current(attrs, instance, name, default=None):
    """Value of a field after a (possibly partial) update is applied."""
    if name in attrs:
        return attrs[name]
    if instance is not None:
        return getattr(instance, name)
    return default


def normalize_tiers(raw):
    """
    Validate tier definitions and return them in stored form.

    Each tier is ``{"threshold": <number>, "value": <number or "N%">}``;
    thresholds are non-negative and strictly ascending.
    """
    if not isinstance(raw, list) or not raw:
        raise serializers.ValidationError("Tiered charges need at least one tier.")

    tiers = []
    previous = None
    for i, tier in enumerate(raw):
        if not isinstance(tier, dict) or "threshold" not in tier or "value" not in tier:
            raise serializers.ValidationError(f"Tier {i} needs 'threshold' and 'value'.")
        try:
            threshold = d(tier["threshold"])
            value = tier["value"]
            is_pct = isinstance(value, str) and value.strip().endswith("%")
            number = d(value.strip()[:-1] if is_pct else value)
            if not threshold.is_finite() or not number.is_finite():
                raise InvalidOperation
        except (InvalidOperation, ValueError, TypeError):
            raise serializers.ValidationError(f"Tier {i} has a non-numeric threshold or value.")
        if threshold < 0 or number < 0:
            raise serializers.ValidationError(f"Tier {i} cannot be negative.")
        if is_pct and number > 100:
            raise serializers.ValidationError(f"Tier {i} percentage cannot exceed 100.")
        if previous is not None and threshold <= previous:
            raise serializers.ValidationError("Tier thresholds must be strictly ascending.")
        previous = threshold
        tiers.append({
            "threshold": str(threshold),
            "value": f"{number}%" if is_pct else str(number),
        })
    return tiers


def normalize_advance_payment(raw):
    """
    Validate a cash-on-delivery advance payment config and return it in stored form.

    Shape: ``{"required": bool, "type": "percentage"|"fixed", "value": <number>, "description": str}``.
    """
    if raw in (None, {}):
        return None
    if not isinstance(raw, dict):
        raise serializers.ValidationError("Advance payment must be an object.")
    required = raw.get("required", True)
    if not isinstance(required, bool):
        raise serializers.ValidationError("'required' must be true or false.")
    kind = raw.get("type", "percentage")
    if kind not in ("percentage", "fixed"):
        raise serializers.ValidationError("Advance payment type must be 'percentage' or 'fixed'.")
    value = raw.get("value")
    try:
        number = d(value)
        if not number.is_finite():
            raise InvalidOperation
    except (InvalidOperation, ValueError, TypeError):
        raise serializers.ValidationError("Advance payment value must be a number.")
    if number < 0:
        raise serializers.ValidationError("Advance payment value cannot be negative.")
    if kind == "percentage" and number > 100:
        raise serializers.ValidationError("Advance payment percentage cannot exceed 100.")
    description = raw.get("description") or ""
    if not isinstance(description, str):
        raise serializers.ValidationError("Advance payment description must be text.")
    return {"required": required, "type": kind, "value": str(number), "description": description}


class TaxConfigurationSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaxConfiguration
        fields = [
            "id", "name", "code", "tax_type", "rate", "is_enabled", "apply_on",
            "conditions", "is_inclusive", "priority", "description", "display_label",
            "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_code(self, value: str) -> str:
        return value.strip().upper()

    def validate_conditions(self, value):
        return _validate_conditions(value)


class OrderChargeSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderCharge
        fields = [
            "id", "name", "code", "type", "amount", "percentage", "tiers", "is_enabled",
            "apply_to", "payment_methods", "conditions", "priority", "description",
            "display_label", "is_taxable", "apply_after_discount", "is_refundable",
            "advance_payment", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_code(self, value: str) -> str:
        return value.strip().upper()

    def validate_conditions(self, value):
        return _validate_conditions(value)

    def validate_payment_methods(self, value):
        if value in (None, []):
            return None
        if not isinstance(value, list) or not all(isinstance(m, str) and m.strip() for m in value):
            raise serializers.ValidationError("Payment methods must be a list of names.")
        return [m.strip() for m in value]

    def validate(self, attrs):
        instance = self.instance
        charge_type = _current(attrs, instance, "type")
        apply_to = _current(attrs, instance, "apply_to", "all")
        errors = {}

        if charge_type == "fixed" and _current(attrs, instance, "amount") is None:
            errors["amount"] = ["Amount is required for fixed charges."]
        if charge_type == "percentage" and _current(attrs, instance, "percentage") is None:
            errors["percentage"] = ["Percentage is required for percentage charges."]
        if charge_type == "tiered":
            try:
                attrs["tiers"] = normalize_tiers(_current(attrs, instance, "tiers"))
            except serializers.ValidationError as exc:
                errors["tiers"] = exc.detail
        if apply_to == "specific_payment_methods" and not _current(attrs, instance, "payment_methods"):
            errors["payment_methods"] = ["Payment methods are required for this charge."]
        if apply_to == "conditional" and not _current(attrs, instance, "conditions"):
            errors["conditions"] = ["Conditions are required for conditional charges."]
        advance = _current(attrs, instance, "advance_payment")
        if advance not in (None, {}):
            if apply_to != "cod_only":
                errors["advance_payment"] = ["Advance payment applies only to cash-on-delivery charges."]
            else:
                try:
                    attrs["advance_payment"] = normalize_advance_payment(advance)
                except serializers.ValidationError as exc:
                    errors["advance_payment"] = exc.detail

        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class ShippingInsuranceSerializer(serializers.ModelSerializer):
    class Meta:
        model = ShippingInsurance
        fields = [
            "id", "name", "description", "min_order_value", "max_order_value",
            "coverage_percentage", "premium_percentage", "minimum_premium",
            "maximum_premium", "is_mandatory", "conditions", "surcharge_schedule",
            "claim_processing_days", "is_active", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_conditions(self, value):
        return _validate_conditions(value, INSURANCE_CONDITION_FIELDS)

    def validate_surcharge_schedule(self, value):
        problems = validate_schedule(value)
        if problems:
            raise serializers.ValidationError(problems)
        return value or None

    def validate(self, attrs):
        instance = self.instance
        errors = {}

        low = _current(attrs, instance, "min_order_value")
        high = _current(attrs, instance, "max_order_value")
        if low is not None and high is not None and high <= low:
            errors["max_order_value"] = ["Maximum order value must be greater than the minimum."]

        floor = _current(attrs, instance, "minimum_premium", 0)
        ceiling = _current(attrs, instance, "maximum_premium")
        if floor is not None and ceiling is not None and ceiling <= floor:
            errors["maximum_premium"] = ["Maximum premium must be greater than the minimum premium."]

        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class PriorityEntrySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    priority = serializers.IntegerField(min_value=0)


class ReorderSerializer(serializers.Serializer):
    items = PriorityEntrySerializer(many=True, allow_empty=False)

    def validate_items(self, value):
        ids = [item["id"] for item in value]
        if len(ids) != len(set(ids)):
            raise serializers.ValidationError("Each rule may appear only once.")
        return value


class OrderContextSerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    payment_method = serializers.CharField(required=False, allow_null=True, allow_blank=False, max_length=64)
    zone = serializers.CharField(required=False, allow_null=True, max_length=16)
    is_remote = serializers.BooleanField(required=False, default=False)
    has_fragile_items = serializers.BooleanField(required=False, default=False)
    has_electronics = serializers.BooleanField(required=False, default=False)
    selected_insurance_plan_id = serializers.IntegerField(required=False, allow_null=True)
    state = serializers.CharField(required=False, allow_null=True, max_length=64)
    pincode = serializers.CharField(required=False, allow_null=True, max_length=16)
    categories = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    discounted_subtotal = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=0, required=False, allow_null=True,
    )

    def to_context(self) -> OrderContext:
        data = dict(self.validated_data)
        data["categories"] = tuple(data.get("categories") or ())
        return OrderContext(**data)


class InsuranceTestSerializer(serializers.Serializer):
    insurance_id = serializers.IntegerField()
    order_value = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=1)
    zone = serializers.CharField(required=False, default="D", max_length=16)
    is_remote = serializers.BooleanField(required=False, default=False)
    has_fragile_items = serializers.BooleanField(required=False, default=False)
    has_electronics = serializers.BooleanField(required=False, default=False)
