"""
Applicability of rules to an order context, and insurance plan resolution.
"""
from __future__ import annotations

import logging
from typing import Sequence

from .conditions import matches
from .exceptions import (
    ConflictingMandatoryRules,
    IneligibleInsuranceSelection,
    UnresolvedInsuranceSelection,
)
from .utils import d

logger = logging.getLogger(__name__)

COD = "cod"

APPLY_ALL = "all"
APPLY_COD_ONLY = "cod_only"
APPLY_ONLINE_ONLY = "online_only"
APPLY_SPECIFIC_METHODS = "specific_payment_methods"
APPLY_CONDITIONAL = "conditional"


def tax_applies(rule, context) -> bool:
    return bool(rule.is_enabled) and matches(rule.conditions, context)


def charge_applies(rule, context) -> bool:
    if not rule.is_enabled:
        return False

    method = context.payment_method
    apply_to = rule.apply_to
    if apply_to == APPLY_ALL:
        return True
    if apply_to == APPLY_COD_ONLY:
        return method == COD
    if apply_to == APPLY_ONLINE_ONLY:
        return method != COD
    if apply_to == APPLY_SPECIFIC_METHODS:
        return method in rule.payment_methods
    if apply_to == APPLY_CONDITIONAL:
        return matches(rule.conditions, context)

    logger.warning("Charge %s has unknown apply_to %r; skipping", rule.id, apply_to)
    return False


def plan_eligible(plan, context) -> bool:
    if not plan.is_active:
        return False
    value = d(context.subtotal)
    if value < plan.min_order_value:
        return False
    if plan.max_order_value is not None and value > plan.max_order_value:
        return False
    return matches(plan.conditions, context)


def resolve_insurance(plans: Sequence, context):
    """
    Pick the insurance plan that applies to an order, if any.

    Resolution order:
      1. More than one eligible mandatory plan is a configuration conflict.
      2. A single eligible mandatory plan always applies.
      3. An explicit selection must be eligible.
      4. Without a selection, optional plans are opt-in: none applies when
         at most one is eligible; several eligible plans are ambiguous.

    Returns:
        InsurancePlan or None

    Raises:
        ConflictingMandatoryRules, IneligibleInsuranceSelection,
        UnresolvedInsuranceSelection
    """
    eligible = [p for p in plans if plan_eligible(p, context)]
    mandatory = [p for p in eligible if p.is_mandatory]

    if len(mandatory) > 1:
        raise ConflictingMandatoryRules(
            "More than one mandatory insurance plan applies to this order",
            [p.id for p in mandatory],
        )
    if mandatory:
        return mandatory[0]

    selected_id = context.selected_insurance_plan_id
    if selected_id is not None:
        for plan in eligible:
            if plan.id == selected_id:
                return plan
        raise IneligibleInsuranceSelection(
            f"Insurance plan {selected_id} is not available for this order",
            [selected_id],
        )

    if len(eligible) <= 1:
        return None
    raise UnresolvedInsuranceSelection(
        "Several insurance plans apply; a selection is required",
        [p.id for p in eligible],
    )
