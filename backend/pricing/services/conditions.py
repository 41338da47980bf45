"""
Closed expression tree for rule ``conditions``.

Stored JSON shape::

    {"field": "zone", "op": "in", "value": ["A", "B"]}
    {"all": [<expr>, ...]}      # AND
    {"any": [<expr>, ...]}      # OR

Fields are read from the order context and each field has a fixed kind that
decides which operators and literals are legal. Parsing happens once when a
rule snapshot is built; evaluation never dispatches on arbitrary keys.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import InvalidOperation
from typing import Any, Optional, Tuple, Union

from .exceptions import ConditionError
from .utils import d

NUMBER = "number"
STRING = "string"
BOOL = "bool"
LIST = "list"

FIELD_KINDS = {
    "subtotal": NUMBER,
    "payment_method": STRING,
    "zone": STRING,
    "is_remote": BOOL,
    "has_fragile_items": BOOL,
    "has_electronics": BOOL,
    "state": STRING,
    "pincode": STRING,
    "categories": LIST,
}

OPERATORS_BY_KIND = {
    NUMBER: {"eq", "ne", "gt", "gte", "lt", "lte", "in", "not_in"},
    STRING: {"eq", "ne", "in", "not_in"},
    BOOL: {"eq", "ne"},
    LIST: {"contains_any", "contains_none"},
}

SET_OPERATORS = {"in", "not_in", "contains_any", "contains_none"}


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str
    value: Any

    def matches(self, context) -> bool:
        actual = getattr(context, self.field, None)
        kind = FIELD_KINDS[self.field]
        if kind == NUMBER and actual is not None:
            actual = d(actual)
        op = self.op

        if op == "eq":
            return actual == self.value
        if op == "ne":
            return actual != self.value
        if op == "in":
            return actual in self.value
        if op == "not_in":
            return actual not in self.value
        if op in ("contains_any", "contains_none"):
            overlap = set(actual or ()) & self.value
            return bool(overlap) if op == "contains_any" else not overlap

        # Ordering operators never match a missing value
        if actual is None:
            return False
        if op == "gt":
            return actual > self.value
        if op == "gte":
            return actual >= self.value
        if op == "lt":
            return actual < self.value
        if op == "lte":
            return actual <= self.value
        return False


@dataclass(frozen=True)
class AllOf:
    children: Tuple["Condition", ...]

    def matches(self, context) -> bool:
        return all(child.matches(context) for child in self.children)


@dataclass(frozen=True)
class AnyOf:
    children: Tuple["Condition", ...]

    def matches(self, context) -> bool:
        return any(child.matches(context) for child in self.children)


Condition = Union[Predicate, AllOf, AnyOf]


def _coerce_scalar(kind: str, raw, path: str):
    if kind == NUMBER:
        if isinstance(raw, bool) or raw is None:
            raise ConditionError(f"expected a number, got {raw!r}", path)
        try:
            value = d(raw)
        except (InvalidOperation, ValueError, TypeError):
            raise ConditionError(f"expected a number, got {raw!r}", path)
        if not value.is_finite():
            raise ConditionError(f"expected a finite number, got {raw!r}", path)
        return value
    if kind == BOOL:
        if not isinstance(raw, bool):
            raise ConditionError(f"expected true or false, got {raw!r}", path)
        return raw
    if not isinstance(raw, str):
        raise ConditionError(f"expected a string, got {raw!r}", path)
    return raw


def _parse_predicate(raw: dict, path: str, allowed_fields) -> Predicate:
    unknown = set(raw) - {"field", "op", "value"}
    if unknown:
        raise ConditionError(f"unexpected keys {sorted(unknown)}", path)

    field = raw.get("field")
    if not isinstance(field, str) or field not in allowed_fields:
        raise ConditionError(f"unknown field {field!r}", path)
    kind = FIELD_KINDS[field]

    op = raw.get("op")
    if not isinstance(op, str) or op not in OPERATORS_BY_KIND[kind]:
        allowed = ", ".join(sorted(OPERATORS_BY_KIND[kind]))
        raise ConditionError(f"operator {op!r} not allowed for {field} (allowed: {allowed})", path)

    if "value" not in raw:
        raise ConditionError("missing 'value'", path)
    value = raw["value"]

    if op in SET_OPERATORS:
        if not isinstance(value, (list, tuple)) or not value:
            raise ConditionError(f"operator {op!r} needs a non-empty list", path)
        item_kind = STRING if kind == LIST else kind
        value = frozenset(
            _coerce_scalar(item_kind, item, f"{path}.value[{i}]") for i, item in enumerate(value)
        )
    else:
        value = _coerce_scalar(kind, value, f"{path}.value")

    return Predicate(field=field, op=op, value=value)


def _parse_node(raw, path: str, allowed_fields) -> Condition:
    if not isinstance(raw, dict):
        raise ConditionError(f"expected an object, got {type(raw).__name__}", path)

    for key, node_cls in (("all", AllOf), ("any", AnyOf)):
        if key in raw:
            if len(raw) != 1:
                raise ConditionError(f"'{key}' must be the only key of its node", path)
            items = raw[key]
            if not isinstance(items, list) or not items:
                raise ConditionError(f"'{key}' needs a non-empty list", path)
            return node_cls(tuple(
                _parse_node(item, f"{path}.{key}[{i}]", allowed_fields) for i, item in enumerate(items)
            ))

    return _parse_predicate(raw, path, allowed_fields)


def parse_condition(raw, allowed_fields=None) -> Optional[Condition]:
    """Validate a stored conditions value and build its expression tree.

    ``None`` and empty objects/lists mean "no conditions" and return ``None``.
    ``allowed_fields`` narrows the context fields a rule kind may reference.
    """
    if raw is None or raw == {} or raw == []:
        return None
    fields = FIELD_KINDS.keys() if allowed_fields is None else set(allowed_fields) & FIELD_KINDS.keys()
    return _parse_node(raw, "$", fields)


def matches(condition: Optional[Condition], context) -> bool:
    """Absent conditions always match."""
    if condition is None:
        return True
    return condition.matches(context)
