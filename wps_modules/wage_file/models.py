"""
Wage File Domain Models (``wps_modules.wage_file.models``).

Responsibility
--------------
Frozen dataclass value objects for wage protection file generation:
the approved payroll batch, its per-employee line items, the encoder's
request envelope and output, encoding warnings, and the persisted wage
file record.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Line items are NOT validated at construction: the encoder validates them
  so that a failure can name the 0-based index of the offending row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Iterable
from uuid import UUID


class BatchStatus(Enum):
    """Payroll batch lifecycle states (owned by the approval workflow)."""
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    PROCESSED = "processed"
    PAID = "paid"


PAYABLE_BATCH_STATUSES = frozenset(
    {BatchStatus.APPROVED, BatchStatus.PROCESSED, BatchStatus.PAID}
)


class WageFileStatus(Enum):
    """Lifecycle of a generated wage file after it leaves the encoder."""
    GENERATED = "generated"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSED = "processed"


@dataclass(frozen=True)
class PayrollBatch:
    """One payroll run for one legal employer."""
    id: UUID
    company_id: UUID
    period_label: str  # e.g. "2025-03"; becomes the file-name period identifier
    period_start: date
    period_end: date  # nominal payment date
    status: BatchStatus = BatchStatus.DRAFT

    def __post_init__(self):
        if self.period_end < self.period_start:
            raise ValueError("period_end cannot be before period_start")

    @property
    def is_payable(self) -> bool:
        return self.status in PAYABLE_BATCH_STATUSES


@dataclass(frozen=True)
class PayrollLineItem:
    """One employee's pay result within a batch."""
    employee_number: str
    employee_full_name: str
    net_salary: Decimal
    national_id: str | None = None  # fallback account reference
    bank_account: str | None = None
    employee_id: UUID | None = None
    batch_id: UUID | None = None

    @property
    def account_reference(self) -> str | None:
        """Bank account if present, else national id, else None."""
        for candidate in (self.bank_account, self.national_id):
            if candidate is not None and str(candidate).strip():
                return str(candidate).strip()
        return None


@dataclass(frozen=True)
class WageFileRequest:
    """The encoder's input envelope (not persisted)."""
    employer_id: str
    establishment_id: str
    line_items: tuple[PayrollLineItem, ...]
    payment_date: date
    period_identifier: str

    def __post_init__(self):
        if not isinstance(self.line_items, tuple):
            object.__setattr__(self, "line_items", tuple(self.line_items))

    @classmethod
    def from_batch(
        cls,
        batch: PayrollBatch,
        line_items: Iterable[PayrollLineItem],
        employer_id: str,
        establishment_id: str,
    ) -> WageFileRequest:
        """Payment date is the batch's period end; the period label names the file."""
        return cls(
            employer_id=employer_id,
            establishment_id=establishment_id,
            line_items=tuple(line_items),
            payment_date=batch.period_end,
            period_identifier=batch.period_label,
        )


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EncodingWarning:
    """
    A lossy or risky transform applied while encoding.

    Warnings never abort the encode; the caller must surface them to the
    operator.  ``index`` is the 0-based line item index, or None for
    request-level fields.
    """
    index: int | None
    field: str

    code: ClassVar[str] = "ENCODING_WARNING"

    @property
    def message(self) -> str:
        where = "request" if self.index is None else f"line item {self.index}"
        return f"{where}: {self.field}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "index": self.index,
            "field": self.field,
            "message": self.message,
        }


@dataclass(frozen=True)
class TruncationWarning(EncodingWarning):
    """An identifier was longer than its field and was truncated."""
    original: str
    width: int

    code: ClassVar[str] = "TRUNCATED"

    @property
    def message(self) -> str:
        where = "request" if self.index is None else f"line item {self.index}"
        return (
            f"{where}: {self.field} '{self.original}' is {len(self.original)} "
            f"characters, truncated to {self.width}"
        )


@dataclass(frozen=True)
class AccountFallbackWarning(EncodingWarning):
    """No bank account or national id; the configured fallback was used."""
    fallback: str

    code: ClassVar[str] = "ACCOUNT_FALLBACK"

    @property
    def message(self) -> str:
        return (
            f"line item {self.index}: no bank account or national id, "
            f"fallback account reference '{self.fallback}' used"
        )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WageFile:
    """
    The encoder's output.  Immutable once returned.

    ``content`` is byte-identical for identical requests; ``file_name``
    is a pure function of the period identifier and payment date.
    """
    file_name: str
    content: str
    record_count: int
    total_amount: Decimal  # exact sum of net_salary, before any rounding
    total_minor_units: int
    payment_date: date
    format_name: str
    encoding: str = "utf-8"
    line_terminator: str = "\n"
    warnings: tuple[EncodingWarning, ...] = ()

    @property
    def lines(self) -> tuple[str, ...]:
        """Records without their line terminators, in file order."""
        if not self.content:
            return ()
        return tuple(self.content.split(self.line_terminator)[:-1])

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_bytes(self) -> bytes:
        return self.content.encode(self.encoding)


@dataclass(frozen=True)
class WageFileRecord:
    """A generated wage file as persisted for audit and download."""
    id: UUID
    batch_id: UUID
    company_id: UUID
    file_name: str
    file_content: str
    file_format: str
    file_encoding: str
    format_name: str
    format_checksum: str
    employer_id: str
    establishment_id: str
    payment_date: date
    total_employees: int
    total_amount: Decimal
    content_sha256: str
    status: WageFileStatus
    generated_by: UUID
    generated_at: datetime
    submission_date: datetime | None = None
    bank_reference: str | None = None
    validation_errors: tuple[dict[str, Any], ...] = ()
    processing_errors: tuple[str, ...] = ()
