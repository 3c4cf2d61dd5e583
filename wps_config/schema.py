"""
Format Variant Schema (``wps_config.schema``).

Responsibility
--------------
Frozen dataclass describing one bank's flavour of the wage protection
interchange format: fixed literals, field widths, pad characters,
delimiter, line terminator, minor-unit exponent and file naming.
Multiple variants are supported by swapping configuration, not code.

Invariants enforced
-------------------
* Every width is a positive integer.
* Delimiter and pad characters are single characters.
* No literal contains the delimiter or a line break.
* ``checksum`` is a deterministic SHA-256 of the canonical JSON form.

Failure modes
-------------
* Any violation raises ``InvalidFormatConfigError`` at construction.
"""

from __future__ import annotations

import codecs
import hashlib
import json
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Self

from wps_kernel.exceptions import InvalidFormatConfigError
from wps_kernel.logging_config import get_logger

logger = get_logger("config.schema")

VALID_LINE_TERMINATORS = {"\n", "\r\n"}
_LINE_BREAKS = ("\n", "\r")


@dataclass(frozen=True)
class FieldWidths:
    """Nominal widths of the fixed-width record fields."""
    account_reference: int = 16
    employee_number: int = 14
    employee_name: int = 35
    amount: int = 15
    employer_id: int = 10
    establishment_id: int = 10
    pseudo_iban: int = 34
    filler: int = 10

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise InvalidFormatConfigError(
                    f"widths.{f.name}", f"must be a positive integer, got {value!r}"
                )


@dataclass(frozen=True)
class WageFormatConfig:
    """
    Immutable description of one interchange format variant.

    Defaults describe the SARIE SIF salary-credit record:

        config = WageFormatConfig()
        bank_x = WageFormatConfig(name="bank_x", routing_code="055", bank_code="055")
    """

    name: str = "sarie_sif"
    description: str = "SARIE Standard Interface Format, salary credit records"

    # File
    file_format: str = "SIF"
    file_prefix: str = "WAGE"
    file_extension: str = "sif"
    encoding: str = "utf-8"
    delimiter: str = "|"
    line_terminator: str = "\n"

    # Fixed literals
    record_type: str = "SCR"
    routing_code: str = "080"
    employee_bank_code: str = "080"
    bank_code: str = "080"
    routing_type: str = "01"
    account_type: str = "01"
    country_code: str = "SA"

    # Account reference used when an employee has neither bank account nor
    # national id.  None makes a missing reference a line item error.
    fallback_account_reference: str | None = "0000000000"

    # Padding
    account_pad: str = " "
    pseudo_iban_pad: str = "0"

    # Amounts are rendered as integer units of 10 ** -minor_unit_exponent
    minor_unit_exponent: int = 2

    widths: FieldWidths = field(default_factory=FieldWidths)

    def __post_init__(self):
        for name in ("name", "file_format", "file_prefix", "file_extension", "encoding"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidFormatConfigError(name, "must be a non-empty string")

        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise InvalidFormatConfigError("encoding", f"unknown encoding '{self.encoding}'")

        if not isinstance(self.delimiter, str) or len(self.delimiter) != 1:
            raise InvalidFormatConfigError("delimiter", "must be a single character")
        if self.delimiter.isalnum() or self.delimiter in (" ", "\n", "\r"):
            raise InvalidFormatConfigError(
                "delimiter", f"'{self.delimiter}' cannot separate fields unambiguously"
            )
        if self.line_terminator not in VALID_LINE_TERMINATORS:
            raise InvalidFormatConfigError(
                "line_terminator", f"must be one of {sorted(VALID_LINE_TERMINATORS)!r}"
            )

        for name in (
            "record_type",
            "routing_code",
            "employee_bank_code",
            "bank_code",
            "routing_type",
            "account_type",
            "country_code",
            "file_prefix",
        ):
            self._check_literal(name, getattr(self, name))
        if self.fallback_account_reference is not None:
            self._check_literal("fallback_account_reference", self.fallback_account_reference)

        for name in ("account_pad", "pseudo_iban_pad"):
            value = getattr(self, name)
            if not isinstance(value, str) or len(value) != 1 or value == self.delimiter:
                raise InvalidFormatConfigError(name, "must be a single non-delimiter character")

        if (
            not isinstance(self.minor_unit_exponent, int)
            or isinstance(self.minor_unit_exponent, bool)
            or not 0 <= self.minor_unit_exponent <= 4
        ):
            raise InvalidFormatConfigError("minor_unit_exponent", "must be an integer in 0..4")

        if not isinstance(self.widths, FieldWidths):
            raise InvalidFormatConfigError("widths", "must be a FieldWidths instance")

        logger.debug(
            "wage_format_config_initialized",
            extra={"format_name": self.name, "file_format": self.file_format},
        )

    def _check_literal(self, name: str, value: Any) -> None:
        if not isinstance(value, str) or not value:
            raise InvalidFormatConfigError(name, f"must be a non-empty string, got {value!r}")
        if self.delimiter in value or any(c in value for c in _LINE_BREAKS):
            raise InvalidFormatConfigError(name, "must not contain the delimiter or a line break")
        try:
            value.encode(self.encoding)
        except UnicodeEncodeError:
            raise InvalidFormatConfigError(name, f"is not representable in {self.encoding}")

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form (nested widths), suitable for YAML or JSON."""
        return asdict(self)

    @property
    def checksum(self) -> str:
        """SHA-256 of the canonical JSON form; identifies the exact variant used."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from a mapping (e.g. loaded from YAML)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidFormatConfigError(unknown[0], "unknown configuration key")

        values = dict(data)
        if "widths" in values:
            raw_widths = values["widths"]
            if isinstance(raw_widths, dict):
                width_names = {f.name for f in fields(FieldWidths)}
                unknown_widths = sorted(set(raw_widths) - width_names)
                if unknown_widths:
                    raise InvalidFormatConfigError(
                        f"widths.{unknown_widths[0]}", "unknown field width"
                    )
                values["widths"] = FieldWidths(**raw_widths)
        logger.info(
            "wage_format_config_loading_from_dict",
            extra={"keys": sorted(values.keys())},
        )
        return cls(**values)
