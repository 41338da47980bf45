from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def d(val) -> Decimal:
    """Coerce incoming values to Decimal safely."""
    if isinstance(val, Decimal):
        return val
    if isinstance(val, bool):
        raise InvalidOperation(f"Cannot coerce boolean {val!r} to Decimal")
    return Decimal(str(val))


def d_or_none(val) -> Optional[Decimal]:
    if val is None or val == "":
        return None
    return d(val)


def minor_unit() -> Decimal:
    """Currency minor unit from settings (0.01 unless configured otherwise)."""
    from django.conf import settings

    return d(getattr(settings, "PRICING_MINOR_UNIT", TWOPLACES))


def finalize(amount: Decimal, unit: Optional[Decimal] = None) -> Decimal:
    """Round a computed component to the currency minor unit, half-up."""
    return d(amount).quantize(unit or minor_unit(), rounding=ROUND_HALF_UP)


def percent_of(base: Decimal, pct: Decimal) -> Decimal:
    return d(base) * d(pct) / HUNDRED
