"""
Wage File Decoder (``wps_modules.wage_file.decoder``).

Responsibility
--------------
Reads salary credit records back out of wage file text: splits each record
on the delimiter, checks the field count and every fixed width, parses the
amount into minor units and the dates into ``date`` objects, and strips
padding from alphanumeric fields.

The encoder uses ``amount_minor_units`` for its consistency check; operators
use ``decode`` to verify a stored or bank-returned file.

Failure modes
-------------
* Any deviation from the layout raises ``MalformedWageFileError`` carrying
  the 1-based line number.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from wps_config.schema import WageFormatConfig
from wps_kernel.exceptions import MalformedWageFileError
from wps_modules.wage_file.fields import DATE_WIDTH, RECORD_FIELDS
from wps_modules.wage_file.helpers import from_minor_units

_AMOUNT_INDEX = RECORD_FIELDS.index("amount")


@dataclass(frozen=True)
class DecodedRecord:
    """One salary credit record with padding removed."""
    line_number: int
    record_type: str
    routing_code: str
    employee_bank_code: str
    account_reference: str
    employee_number: str
    employee_name: str
    amount_minor_units: int
    amount: Decimal
    payment_date: date
    value_date: date
    employer_id: str
    establishment_id: str
    bank_code: str
    routing_type: str
    account_type: str
    pseudo_iban: str


class WageFileDecoder:
    """Parses wage file text produced under a given format variant."""

    def __init__(self, config: WageFormatConfig | None = None):
        self._config = config or WageFormatConfig()
        w = self._config.widths
        self._widths = {
            "account_reference": w.account_reference,
            "employee_number": w.employee_number,
            "employee_name": w.employee_name,
            "amount": w.amount,
            "payment_date": DATE_WIDTH,
            "value_date": DATE_WIDTH,
            "employer_id": w.employer_id,
            "establishment_id": w.establishment_id,
            "pseudo_iban": w.pseudo_iban,
            "filler": w.filler,
        }

    @property
    def config(self) -> WageFormatConfig:
        return self._config

    def split_record(self, line: str, line_number: int = 1) -> tuple[str, ...]:
        """Split a record into its raw fields; the count must match the layout."""
        parts = tuple(line.split(self._config.delimiter))
        if len(parts) != len(RECORD_FIELDS):
            raise MalformedWageFileError(
                line_number,
                f"expected {len(RECORD_FIELDS)} fields, found {len(parts)}",
            )
        return parts

    def amount_minor_units(self, line: str, line_number: int = 1) -> int:
        """Parse only the amount field of a record."""
        raw = self.split_record(line, line_number)[_AMOUNT_INDEX]
        return self._parse_amount(raw, line_number)

    def decode_record(self, line: str, line_number: int = 1) -> DecodedRecord:
        raw = dict(zip(RECORD_FIELDS, self.split_record(line, line_number)))

        for name, width in self._widths.items():
            if len(raw[name]) != width:
                raise MalformedWageFileError(
                    line_number,
                    f"{name} is {len(raw[name])} characters, expected {width}",
                )
        if raw["record_type"] != self._config.record_type:
            raise MalformedWageFileError(
                line_number, f"unexpected record type '{raw['record_type']}'"
            )
        if raw["filler"].strip(" "):
            raise MalformedWageFileError(line_number, "filler is not blank")

        minor_units = self._parse_amount(raw["amount"], line_number)
        return DecodedRecord(
            line_number=line_number,
            record_type=raw["record_type"],
            routing_code=raw["routing_code"],
            employee_bank_code=raw["employee_bank_code"],
            account_reference=raw["account_reference"].rstrip(self._config.account_pad),
            employee_number=raw["employee_number"].rstrip(" "),
            employee_name=raw["employee_name"].rstrip(" "),
            amount_minor_units=minor_units,
            amount=from_minor_units(minor_units, self._config.minor_unit_exponent),
            payment_date=self._parse_date(raw["payment_date"], "payment_date", line_number),
            value_date=self._parse_date(raw["value_date"], "value_date", line_number),
            employer_id=raw["employer_id"].rstrip(" "),
            establishment_id=raw["establishment_id"].rstrip(" "),
            bank_code=raw["bank_code"],
            routing_type=raw["routing_type"],
            account_type=raw["account_type"],
            pseudo_iban=raw["pseudo_iban"],
        )

    def decode(self, content: str) -> tuple[DecodedRecord, ...]:
        """Decode every record of a wage file."""
        if not content:
            return ()
        terminator = self._config.line_terminator
        lines = content.split(terminator)
        if lines[-1] != "":
            raise MalformedWageFileError(len(lines), "record is not terminated")
        return tuple(
            self.decode_record(line, line_number)
            for line_number, line in enumerate(lines[:-1], 1)
        )

    def _parse_amount(self, raw: str, line_number: int) -> int:
        if len(raw) != self._config.widths.amount or not (raw.isascii() and raw.isdigit()):
            raise MalformedWageFileError(
                line_number,
                f"amount '{raw}' is not {self._config.widths.amount} digits",
            )
        return int(raw)

    @staticmethod
    def _parse_date(raw: str, name: str, line_number: int) -> date:
        if not (raw.isascii() and raw.isdigit()):
            raise MalformedWageFileError(line_number, f"{name} '{raw}' is not YYYYMMDD")
        try:
            return date(int(raw[:4]), int(raw[4:6]), int(raw[6:8]))
        except ValueError:
            raise MalformedWageFileError(line_number, f"{name} '{raw}' is not a calendar date")
