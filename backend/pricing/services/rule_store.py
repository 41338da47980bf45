"""
Rule store: authoring operations over the three rule kinds, and the cached
read-only snapshot the evaluator consumes.

Writes go through serializer validation and invalidate only the snapshot
cache key. Priority reorders run in one transaction with the affected rows
locked, so a snapshot never sees half of a reorder.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from django.conf import settings
from django.core.cache import cache
from django.db import transaction

from ..dataclasses import ChargeRule, InsurancePlan, RuleSnapshot, TaxRule
from ..models import OrderCharge, ShippingInsurance, TaxConfiguration
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

SNAPSHOT_CACHE_KEY = "pricing:rule-snapshot"

TAX = "tax"
CHARGE = "charge"
INSURANCE = "insurance"


@dataclass(frozen=True)
class RuleKind:
    name: str
    model: type
    serializer_path: str
    enabled_field: str
    ordering: Tuple[str, ...]
    reorderable: bool

    @property
    def serializer_class(self):
        from .. import serializers

        return getattr(serializers, self.serializer_path)


KINDS: Dict[str, RuleKind] = {
    TAX: RuleKind(TAX, TaxConfiguration, "TaxConfigurationSerializer", "is_enabled", ("priority", "id"), True),
    CHARGE: RuleKind(CHARGE, OrderCharge, "OrderChargeSerializer", "is_enabled", ("priority", "id"), True),
    INSURANCE: RuleKind(
        INSURANCE, ShippingInsurance, "ShippingInsuranceSerializer", "is_active", ("min_order_value", "id"), False,
    ),
}


def invalidate_snapshot() -> None:
    cache.delete(SNAPSHOT_CACHE_KEY)
    logger.debug("Rule snapshot cache invalidated")


def build_snapshot() -> RuleSnapshot:
    """Read every enabled rule in one transaction and freeze it."""
    with transaction.atomic():
        taxes = [TaxRule.from_model(t) for t in TaxConfiguration.objects.filter(is_enabled=True)]
        charges = [ChargeRule.from_model(c) for c in OrderCharge.objects.filter(is_enabled=True)]
        plans = [InsurancePlan.from_model(p) for p in ShippingInsurance.objects.filter(is_active=True)]
    return RuleSnapshot.build(taxes, charges, plans)


class RuleStore:
    """Authoring and read access for tax, charge and insurance rules."""

    def kind(self, name: str) -> RuleKind:
        try:
            return KINDS[name]
        except KeyError:
            raise ValidationError({"kind": [f"Unknown rule kind '{name}'."]})

    def queryset(self, kind: str):
        k = self.kind(kind)
        return k.model.objects.order_by(*k.ordering)

    def list(self, kind: str) -> List:
        return list(self.queryset(kind))

    def get(self, kind: str, rule_id: int):
        return self.kind(kind).model.objects.get(pk=rule_id)

    def upsert(self, kind: str, data: Mapping, instance=None, partial: bool = False):
        """
        Create a rule, or update ``instance`` when given.

        Raises:
            ValidationError: field-level problems, keyed by field name
        """
        k = self.kind(kind)
        serializer = k.serializer_class(instance=instance, data=data, partial=partial)
        if not serializer.is_valid():
            raise ValidationError(serializer.errors)
        obj = serializer.save()
        logger.info("%s rule %s %s", k.name, obj.pk, "updated" if instance is not None else "created")
        return obj

    def delete(self, kind: str, instance) -> None:
        k = self.kind(kind)
        rule_id = instance.pk
        instance.delete()
        logger.info("%s rule %s deleted", k.name, rule_id)

    def set_enabled(self, kind: str, rule_id: int, enabled: bool):
        k = self.kind(kind)
        with transaction.atomic():
            obj = k.model.objects.select_for_update().get(pk=rule_id)
            setattr(obj, k.enabled_field, enabled)
            obj.save(update_fields=[k.enabled_field, "updated_at"])
        logger.info("%s rule %s %s", k.name, rule_id, "enabled" if enabled else "disabled")
        return obj

    def toggle(self, kind: str, rule_id: int):
        k = self.kind(kind)
        current = getattr(self.get(kind, rule_id), k.enabled_field)
        return self.set_enabled(kind, rule_id, not current)

    def reorder(self, kind: str, entries: Iterable[Mapping]) -> int:
        """
        Apply a batch of ``{"id", "priority"}`` assignments atomically.

        The whole batch is rejected when any id is unknown or repeated, or
        any priority is negative.
        """
        k = self.kind(kind)
        if not k.reorderable:
            raise ValidationError({"kind": [f"{k.name} rules have no priority to reorder."]})

        wanted: Dict[int, int] = {}
        for entry in entries:
            rule_id, priority = entry.get("id"), entry.get("priority")
            if not isinstance(rule_id, int) or not isinstance(priority, int) or priority < 0:
                raise ValidationError({"items": ["Each item needs an integer id and a non-negative priority."]})
            if rule_id in wanted:
                raise ValidationError({"items": [f"Rule {rule_id} appears more than once."]})
            wanted[rule_id] = priority
        if not wanted:
            raise ValidationError({"items": ["Nothing to reorder."]})

        with transaction.atomic():
            rows = {r.pk: r for r in k.model.objects.select_for_update().filter(pk__in=wanted)}
            missing = sorted(set(wanted) - set(rows))
            if missing:
                raise ValidationError({"items": [f"Unknown rule ids: {missing}."]})
            for rule_id, priority in wanted.items():
                rows[rule_id].priority = priority
            k.model.objects.bulk_update(list(rows.values()), ["priority"])
            # bulk_update sends no post_save signals
            invalidate_snapshot()
            transaction.on_commit(invalidate_snapshot)

        logger.info("Reordered %d %s rules", len(wanted), k.name)
        return len(wanted)

    def snapshot(self) -> RuleSnapshot:
        snap: Optional[RuleSnapshot] = cache.get(SNAPSHOT_CACHE_KEY)
        if snap is None:
            snap = build_snapshot()
            cache.set(SNAPSHOT_CACHE_KEY, snap, getattr(settings, "PRICING_SNAPSHOT_TTL", 300))
        return snap


store = RuleStore()
