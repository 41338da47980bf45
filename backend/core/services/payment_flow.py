"""
Payment-flow settings and the gate they apply in front of the evaluator.

The gate only narrows what the evaluator sees: it may fill in the payment
method from ``default_type`` and drop charges that target a disabled
payment channel. It never changes rule amounts or ordering.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Tuple

from django.core.cache import cache

from core.models import AdminSetting
from pricing.dataclasses import OrderContext, RuleSnapshot
from pricing.services.applicability import APPLY_COD_ONLY, APPLY_ONLINE_ONLY, COD

logger = logging.getLogger(__name__)

CACHE_KEY = "core:payment-flow"
SETTING_PREFIX = "payment_flow."

FLOW_TYPES = ("two_tier", "single_list", "cod_first")
DEFAULT_TYPES = ("none", "online", "cod")
ONLINE = "online"


@dataclass(frozen=True)
class PaymentFlow:
    flow_type: str = "two_tier"
    default_type: str = "none"
    cod_enabled: bool = True
    online_payment_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_payment_flow() -> PaymentFlow:
    flow = cache.get(CACHE_KEY)
    if flow is None:
        defaults = PaymentFlow()
        flow = PaymentFlow(**{
            name: AdminSetting.get(SETTING_PREFIX + name, value)
            for name, value in defaults.to_dict().items()
        })
        cache.set(CACHE_KEY, flow, None)
    return flow


def save_payment_flow(changes: Mapping[str, Any]) -> Tuple[PaymentFlow, PaymentFlow]:
    """Persist the given fields and return ``(old, new)``."""
    old = load_payment_flow()
    new = replace(old, **dict(changes))
    for name, value in new.to_dict().items():
        AdminSetting.set(SETTING_PREFIX + name, value)
    cache.delete(CACHE_KEY)
    logger.info("Payment flow updated: %s", new.to_dict())
    return old, new


def gate_snapshot(snapshot: RuleSnapshot, flow: PaymentFlow, context: OrderContext) -> Tuple[RuleSnapshot, OrderContext]:
    if context.payment_method is None and flow.default_type != "none":
        context = replace(context, payment_method=COD if flow.default_type == "cod" else ONLINE)

    blocked = set()
    if not flow.cod_enabled:
        blocked.add(APPLY_COD_ONLY)
    if not flow.online_payment_enabled:
        blocked.add(APPLY_ONLINE_ONLY)
    if blocked:
        charges = tuple(c for c in snapshot.charges if c.apply_to not in blocked)
        snapshot = replace(snapshot, charges=charges)
    return snapshot, context
