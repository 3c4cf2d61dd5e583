"""
Wage File Helpers (``wps_modules.wage_file.helpers``).

Responsibility
--------------
Pure functions shared by the encoder, decoder, service and loaders:
minor-unit conversion, amount and date coercion, and file naming.

Invariants enforced
-------------------
* All amounts are ``Decimal`` -- NEVER ``float``.
* Minor-unit conversion rounds half-up, never half-to-even: bank amounts
  must reconcile against a manual calculation.

Failure modes
-------------
* ``coerce_amount`` / ``coerce_date`` raise ``ValueError`` with a short
  reason; callers wrap it into a typed error naming the field and row.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from wps_modules.wage_file.fields import date_field

_MINOR_UNIT_PRECISION = 60


def to_minor_units(amount: Decimal, exponent: int = 2) -> int:
    """
    Convert a currency amount to integer minor units, rounding half-up.

    >>> to_minor_units(Decimal("7250.505"))
    725051
    """
    with localcontext() as ctx:
        ctx.prec = _MINOR_UNIT_PRECISION
        scaled = amount.scaleb(exponent).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(scaled)


def from_minor_units(units: int, exponent: int = 2) -> Decimal:
    """Inverse of ``to_minor_units`` for whole minor units."""
    return Decimal(units).scaleb(-exponent)


def coerce_amount(value: Any) -> Decimal:
    """
    Accept ``Decimal``, ``int`` or a numeric string; reject floats and
    non-finite values.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"must be a Decimal, int or numeric string, got {type(value).__name__}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            raise ValueError(f"'{value}' is not a number")
    else:
        raise ValueError(f"must be a Decimal, int or numeric string, got {type(value).__name__}")
    if not amount.is_finite():
        raise ValueError(f"'{value}' is not a finite amount")
    return amount


def coerce_date(value: Any) -> date:
    """Accept a ``date``, a ``datetime`` (narrowed to its date) or an ISO string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise ValueError(f"must be a date, got {type(value).__name__}")


def build_file_name(
    period_identifier: str,
    payment_date: date,
    prefix: str = "WAGE",
    extension: str = "sif",
) -> str:
    """
    ``<prefix>_<period>_<YYYYMMDD>.<extension>``.

    >>> build_file_name("2025-03", date(2025, 3, 31))
    'WAGE_2025-03_20250331.sif'
    """
    return f"{prefix}_{period_identifier}_{date_field(payment_date).text}.{extension}"
