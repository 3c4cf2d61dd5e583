"""
Fixed-width field builder (``wps_modules.wage_file.fields``).

Every field of a wage file record is produced by one of the small
builders below, so width and padding rules live in exactly one place.
Each builder returns a ``FieldValue`` whose ``text`` has exactly the
requested width; ``truncated`` reports whether input was cut.

* ``alphanumeric`` -- left-aligned, right-padded (spaces by default),
  truncated to width.  Never zero-pads: padding an account number with
  zeros changes its meaning.
* ``numeric`` -- zero-padded on the left.  Overflow and negatives raise
  ``FieldOverflowError``; a number is never truncated.
* ``date_field`` -- ``YYYYMMDD`` with no separators.
* ``literal`` -- a configured code, emitted as-is.
* ``filler`` -- reserved space.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from wps_kernel.exceptions import FieldOverflowError

DATE_WIDTH = 8

# Field order of a salary credit record.
RECORD_FIELDS: tuple[str, ...] = (
    "record_type",
    "routing_code",
    "employee_bank_code",
    "account_reference",
    "employee_number",
    "employee_name",
    "amount",
    "payment_date",
    "value_date",
    "employer_id",
    "establishment_id",
    "bank_code",
    "routing_type",
    "account_type",
    "pseudo_iban",
    "filler",
)


@dataclass(frozen=True, slots=True)
class FieldValue:
    """Rendered text of one field."""
    text: str
    truncated: bool = False


def alphanumeric(value: str, width: int, pad: str = " ") -> FieldValue:
    """Right-pad ``value`` with ``pad`` to ``width``; truncate if longer."""
    if len(value) > width:
        return FieldValue(value[:width], truncated=True)
    return FieldValue(value.ljust(width, pad))


def numeric(value: int, width: int) -> FieldValue:
    """Zero-pad a non-negative integer on the left to ``width`` digits."""
    if value < 0:
        raise FieldOverflowError(width, value)
    text = f"{value:0{width}d}"
    if len(text) > width:
        raise FieldOverflowError(width, value)
    return FieldValue(text)


def date_field(value: date) -> FieldValue:
    """Render ``YYYYMMDD``."""
    if isinstance(value, datetime):
        value = value.date()
    return FieldValue(f"{value.year:04d}{value.month:02d}{value.day:02d}")


def literal(value: str) -> FieldValue:
    return FieldValue(value)


def filler(width: int, pad: str = " ") -> FieldValue:
    return FieldValue(pad * width)
