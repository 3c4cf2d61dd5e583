"""
Wage File Encoder (``wps_modules.wage_file.encoder``).

Responsibility
--------------
Deterministically renders a payroll batch into the fixed-layout,
delimiter-separated wage protection interchange format and reports the
aggregate totals.  No network, storage or clock access.

Architecture position
---------------------
**Modules layer** -- pure transformation.  Configured once with an
immutable ``WageFormatConfig``; safe to call concurrently for different
batches (no shared mutable state).

Record layout (reference variant, 16 fields)
--------------------------------------------
 1. record type             literal
 2. routing code            literal
    employee bank code      literal
 3. account reference       bank account / national id / fallback, space-padded
 4. employee number         space-padded, truncation warned
 5. employee name           space-padded, truncated silently
 6. amount                  minor units, half-up, zero-padded
 7. payment date            YYYYMMDD
    value date              YYYYMMDD (same as payment date)
 8. employer id             space-padded, truncation warned
    establishment id        space-padded, truncation warned
 9. bank code               literal
    routing type            literal
    account type            literal
10. pseudo-IBAN             country code + account reference, padded (NOT an IBAN)
11. filler                  spaces

Failure modes
-------------
* ``InvalidRequestError`` -- envelope problems; nothing is rendered.
* ``InvalidLineItemError`` -- any row problem rejects the whole batch.
* ``WageFileConsistencyError`` -- rendered amounts disagree with the total.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from wps_config.schema import WageFormatConfig
from wps_kernel.exceptions import (
    FieldOverflowError,
    InvalidLineItemError,
    InvalidRequestError,
    WageFileConsistencyError,
    WageFileError,
)
from wps_kernel.logging_config import get_logger
from wps_modules.wage_file.decoder import WageFileDecoder
from wps_modules.wage_file.fields import (
    FieldValue,
    alphanumeric,
    date_field,
    filler,
    literal,
    numeric,
)
from wps_modules.wage_file.helpers import (
    build_file_name,
    coerce_amount,
    coerce_date,
    from_minor_units,
    to_minor_units,
)
from wps_modules.wage_file.models import (
    AccountFallbackWarning,
    EncodingWarning,
    PayrollLineItem,
    TruncationWarning,
    WageFile,
    WageFileRequest,
)

logger = get_logger("modules.wage_file.encoder")

_LINE_BREAKS = ("\n", "\r")
_PATH_UNSAFE = ("/", "\\")


@dataclass(frozen=True)
class _PreparedItem:
    """A validated line item, ready to render."""
    employee_number: str
    employee_name: str
    amount: Decimal
    minor_units: int
    account_reference: str
    used_fallback: bool


class WageFileEncoder:
    """
    Renders ``WageFileRequest`` objects into ``WageFile`` objects.

    Usage::

        encoder = WageFileEncoder(get_format_config("sarie_sif"))
        wage_file = encoder.encode(WageFileRequest.from_batch(
            batch, line_items, employer_id="1000000001",
            establishment_id="2000000002",
        ))
        for warning in wage_file.warnings:
            notify_operator(warning.message)
    """

    def __init__(self, config: WageFormatConfig | None = None):
        self._config = config or WageFormatConfig()
        self._decoder = WageFileDecoder(self._config)

    @property
    def config(self) -> WageFormatConfig:
        return self._config

    def encode(self, request: WageFileRequest) -> WageFile:
        """
        Encode a request.  Returns a complete ``WageFile`` or raises; a
        partial file is never returned.
        """
        logger.info(
            "wage_file_encode_started",
            extra={
                "format_name": self._config.name,
                "line_item_count": len(request.line_items),
                "period_identifier": request.period_identifier,
            },
        )
        try:
            wage_file = self._encode(request)
        except WageFileError as exc:
            logger.warning(
                "wage_file_encode_rejected",
                extra={
                    "error_code": exc.code,
                    "index": getattr(exc, "index", None),
                    "field": getattr(exc, "field", None),
                    "reason": getattr(exc, "reason", str(exc)),
                },
            )
            raise

        logger.info(
            "wage_file_encoded",
            extra={
                "file_name": wage_file.file_name,
                "record_count": wage_file.record_count,
                "total_amount": str(wage_file.total_amount),
                "warning_count": len(wage_file.warnings),
            },
        )
        return wage_file

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _encode(self, request: WageFileRequest) -> WageFile:
        cfg = self._config
        payment_date = self._validate_request(request)
        prepared = [
            self._prepare_item(index, item)
            for index, item in enumerate(request.line_items)
        ]

        warnings: list[EncodingWarning] = []
        employer = self._identifier(
            None, "employer_id", request.employer_id.strip(), cfg.widths.employer_id, warnings
        )
        establishment = self._identifier(
            None,
            "establishment_id",
            request.establishment_id.strip(),
            cfg.widths.establishment_id,
            warnings,
        )
        payment = date_field(payment_date)

        lines = [
            self._render_record(index, item, payment, employer, establishment, warnings)
            for index, item in enumerate(prepared)
        ]

        # Exact sum, before any per-record rounding.
        total_amount = sum((item.amount for item in prepared), Decimal("0"))
        expected = to_minor_units(total_amount, cfg.minor_unit_exponent)
        rendered = sum(
            self._decoder.amount_minor_units(line, line_number)
            for line_number, line in enumerate(lines, 1)
        )
        if rendered != expected:
            rounded = tuple(
                index
                for index, item in enumerate(prepared)
                if from_minor_units(item.minor_units, cfg.minor_unit_exponent) != item.amount
            )
            raise WageFileConsistencyError(expected, rendered, rounded)

        terminator = cfg.line_terminator
        content = "".join(line + terminator for line in lines)
        return WageFile(
            file_name=build_file_name(
                request.period_identifier.strip(),
                payment_date,
                prefix=cfg.file_prefix,
                extension=cfg.file_extension,
            ),
            content=content,
            record_count=len(lines),
            total_amount=total_amount,
            total_minor_units=expected,
            payment_date=payment_date,
            format_name=cfg.name,
            encoding=cfg.encoding,
            line_terminator=terminator,
            warnings=tuple(warnings),
        )

    def _validate_request(self, request: WageFileRequest) -> date:
        for name in ("employer_id", "establishment_id"):
            value = getattr(request, name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidRequestError(name, "is required")
            problem = self._text_problem(value)
            if problem:
                raise InvalidRequestError(name, problem)

        period = request.period_identifier
        if not isinstance(period, str) or not period.strip():
            raise InvalidRequestError("period_identifier", "is required")
        if any(c in period.strip() for c in _PATH_UNSAFE) or any(
            c.isspace() for c in period.strip()
        ):
            raise InvalidRequestError(
                "period_identifier", "must not contain path separators or whitespace"
            )

        if not request.line_items:
            raise InvalidRequestError("line_items", "at least one line item is required")

        try:
            return coerce_date(request.payment_date)
        except ValueError as exc:
            raise InvalidRequestError("payment_date", str(exc))

    def _prepare_item(self, index: int, item: Any) -> _PreparedItem:
        if not isinstance(item, PayrollLineItem):
            raise InvalidLineItemError(index, "line_item", "is not a PayrollLineItem")

        employee_number = self._required_text(index, "employee_number", item.employee_number)
        employee_name = self._required_text(index, "employee_full_name", item.employee_full_name)

        try:
            amount = coerce_amount(item.net_salary)
        except ValueError as exc:
            raise InvalidLineItemError(index, "net_salary", str(exc))
        if amount < 0:
            raise InvalidLineItemError(index, "net_salary", "must not be negative")
        try:
            minor_units = to_minor_units(amount, self._config.minor_unit_exponent)
            numeric(minor_units, self._config.widths.amount)
        except (FieldOverflowError, InvalidOperation):
            raise InvalidLineItemError(
                index,
                "net_salary",
                f"does not fit a {self._config.widths.amount}-digit amount field",
            )

        account = item.account_reference
        used_fallback = False
        if account is None:
            if self._config.fallback_account_reference is None:
                raise InvalidLineItemError(
                    index, "account_reference", "no bank account or national id"
                )
            account = self._config.fallback_account_reference
            used_fallback = True
        else:
            problem = self._text_problem(account)
            if problem:
                raise InvalidLineItemError(index, "account_reference", problem)

        return _PreparedItem(
            employee_number=employee_number,
            employee_name=employee_name,
            amount=amount,
            minor_units=minor_units,
            account_reference=account,
            used_fallback=used_fallback,
        )

    def _required_text(self, index: int, name: str, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise InvalidLineItemError(index, name, "is required")
        problem = self._text_problem(value)
        if problem:
            raise InvalidLineItemError(index, name, problem)
        return value.strip()

    def _text_problem(self, value: str) -> str | None:
        """Why ``value`` cannot go into a record, or None if it can."""
        if self._config.delimiter in value or any(c in value for c in _LINE_BREAKS):
            return "contains the delimiter or a line break"
        try:
            value.encode(self._config.encoding)
        except UnicodeEncodeError:
            return f"is not representable in {self._config.encoding}"
        return None

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_record(
        self,
        index: int,
        item: _PreparedItem,
        payment: FieldValue,
        employer: FieldValue,
        establishment: FieldValue,
        warnings: list[EncodingWarning],
    ) -> str:
        cfg = self._config
        w = cfg.widths

        if item.used_fallback:
            warnings.append(AccountFallbackWarning(index, "account_reference", item.account_reference))
            logger.warning(
                "wage_file_account_fallback",
                extra={"index": index, "fallback": item.account_reference},
            )

        account = self._identifier(
            index, "account_reference", item.account_reference, w.account_reference,
            warnings, pad=cfg.account_pad,
        )
        employee_number = self._identifier(
            index, "employee_number", item.employee_number, w.employee_number, warnings
        )

        name = alphanumeric(item.employee_name, w.employee_name)
        if name.truncated:
            logger.debug(
                "wage_file_name_truncated",
                extra={"index": index, "width": w.employee_name},
            )

        pseudo_iban = self._identifier(
            index, "pseudo_iban", cfg.country_code + item.account_reference, w.pseudo_iban,
            warnings, pad=cfg.pseudo_iban_pad,
        )

        values = (
            literal(cfg.record_type),
            literal(cfg.routing_code),
            literal(cfg.employee_bank_code),
            account,
            employee_number,
            name,
            numeric(item.minor_units, w.amount),
            payment,
            payment,  # value date == payment date
            employer,
            establishment,
            literal(cfg.bank_code),
            literal(cfg.routing_type),
            literal(cfg.account_type),
            pseudo_iban,
            filler(w.filler),
        )
        return cfg.delimiter.join(v.text for v in values)

    @staticmethod
    def _identifier(
        index: int | None,
        name: str,
        value: str,
        width: int,
        warnings: list[EncodingWarning],
        pad: str = " ",
    ) -> FieldValue:
        """Pad an identifier; truncation is recorded as a warning."""
        rendered = alphanumeric(value, width, pad)
        if rendered.truncated:
            warnings.append(TruncationWarning(index, name, value, width))
            logger.warning(
                "wage_file_truncation_warning",
                extra={"index": index, "field": name, "length": len(value), "width": width},
            )
        return rendered
