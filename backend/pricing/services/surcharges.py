"""
Pluggable insurance premium surcharge policies.

The active policy is named by the ``PRICING_SURCHARGE_POLICY`` setting (a
dotted path). ``ScheduleSurcharge`` reads each plan's ``surcharge_schedule``,
a list of adjustments applied in order to the clamped premium::

    [
        {"type": "zone_multiplier", "zones": {"E": "1.5"}},
        {"type": "remote_surcharge", "amount": "50"},
        {"type": "high_value_discount", "threshold": "10000", "discount_percent": "10"},
        {"type": "fragile_item_surcharge", "multiplier": "1.5"},
        {"type": "electronics_surcharge", "multiplier": "1.3"},
    ]
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Protocol

from django.conf import settings
from django.utils.module_loading import import_string

from .utils import HUNDRED, d

logger = logging.getLogger(__name__)

DEFAULT_POLICY = "pricing.services.surcharges.ScheduleSurcharge"


class SurchargePolicy(Protocol):
    def apply(self, plan, premium: Decimal, order_value: Decimal, context) -> Decimal: ...


class NoSurcharge:
    """Leaves the clamped premium untouched."""

    def apply(self, plan, premium, order_value, context):
        return premium


def _zone_multiplier(entry, premium, order_value, context):
    zone = getattr(context, "zone", None)
    multiplier = (entry.get("zones") or {}).get(zone)
    if multiplier is None:
        return premium
    return premium * d(multiplier)


def _remote_surcharge(entry, premium, order_value, context):
    if getattr(context, "is_remote", False):
        return premium + d(entry.get("amount", 0))
    return premium


def _high_value_discount(entry, premium, order_value, context):
    if order_value >= d(entry.get("threshold", 10000)):
        return premium * (1 - d(entry.get("discount_percent", 10)) / HUNDRED)
    return premium


def _fragile_item_surcharge(entry, premium, order_value, context):
    if getattr(context, "has_fragile_items", False):
        return premium * d(entry.get("multiplier", "1.5"))
    return premium


def _electronics_surcharge(entry, premium, order_value, context):
    if getattr(context, "has_electronics", False):
        return premium * d(entry.get("multiplier", "1.3"))
    return premium


ADJUSTMENTS = {
    "zone_multiplier": _zone_multiplier,
    "remote_surcharge": _remote_surcharge,
    "high_value_discount": _high_value_discount,
    "fragile_item_surcharge": _fragile_item_surcharge,
    "electronics_surcharge": _electronics_surcharge,
}

# Numeric keys each adjustment accepts
ADJUSTMENT_KEYS = {
    "zone_multiplier": (),
    "remote_surcharge": ("amount",),
    "high_value_discount": ("threshold", "discount_percent"),
    "fragile_item_surcharge": ("multiplier",),
    "electronics_surcharge": ("multiplier",),
}


class ScheduleSurcharge:
    """Applies the plan's ``surcharge_schedule`` entries in order."""

    def apply(self, plan, premium, order_value, context):
        for entry in plan.surcharge_schedule or ():
            adjust = ADJUSTMENTS.get(entry.get("type"))
            if adjust is None:
                logger.warning("Plan %s: unknown surcharge type %r ignored", plan.id, entry.get("type"))
                continue
            premium = adjust(entry, premium, order_value, context)
        return premium


def validate_schedule(raw: Any) -> List[str]:
    """Return a list of problems with a ``surcharge_schedule`` value (empty when valid)."""
    if raw in (None, []):
        return []
    if not isinstance(raw, list):
        return ["Surcharge schedule must be a list."]

    errors = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, Mapping):
            errors.append(f"Entry {i} must be an object.")
            continue
        kind = entry.get("type")
        if kind not in ADJUSTMENTS:
            errors.append(f"Entry {i} has unknown type {kind!r}.")
            continue
        numbers: Dict[str, Any] = {k: entry[k] for k in ADJUSTMENT_KEYS[kind] if k in entry}
        if kind == "zone_multiplier":
            zones = entry.get("zones")
            if not isinstance(zones, Mapping) or not zones:
                errors.append(f"Entry {i} needs a non-empty 'zones' mapping.")
                continue
            numbers = {f"zones.{z}": m for z, m in zones.items()}
        for key, value in numbers.items():
            try:
                number = d(value)
                if not number.is_finite() or number < 0:
                    raise InvalidOperation
            except (InvalidOperation, ValueError, TypeError):
                errors.append(f"Entry {i}: '{key}' must be a non-negative number.")
    return errors


def load_surcharge_policy(path: str = None) -> SurchargePolicy:
    path = path or getattr(settings, "PRICING_SURCHARGE_POLICY", DEFAULT_POLICY)
    return import_string(path)()
