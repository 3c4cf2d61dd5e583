"""
Wage File ORM Persistence Model (``wps_modules.wage_file.orm``).

Responsibility:
    SQLAlchemy ORM model persisting generated wage files for audit and
    download (``wps_files`` table).  Mirrors the ``WageFileRecord`` DTO and
    provides ``to_dto()`` / ``from_dto()`` round-trip conversion.

Invariants enforced:
    - Monetary totals use Decimal (maps to Numeric(38,9)) -- NEVER float.
    - Status is stored as the ``WageFileStatus`` .value string.
    - One row per (batch, file name, content hash): regenerating an
      unchanged file does not insert a duplicate.

Audit relevance:
    The stored content, its SHA-256, the format checksum and the encoding
    warnings tie every submitted file to the exact inputs and variant that
    produced it.  TrackedBase audit columns are inherited.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Date, DateTime, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wps_kernel.db.base import TrackedBase


def _aware(value: datetime | None) -> datetime | None:
    """Backends without timezone support hand back naive UTC datetimes."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class WageFileModel(TrackedBase):
    """
    ORM model for ``WageFileRecord`` -- one generated wage file.

    Guarantees:
        - ``content_sha256`` is the hex SHA-256 of ``file_content`` encoded
          with ``file_encoding``.
        - ``validation_errors`` holds serialized encoding warnings.
        - ``processing_errors`` holds bank-side errors reported back.
    """

    __tablename__ = "wps_files"

    batch_id: Mapped[UUID] = mapped_column(nullable=False)
    company_id: Mapped[UUID] = mapped_column(nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_content: Mapped[str] = mapped_column(Text, nullable=False)
    file_format: Mapped[str] = mapped_column(String(10), nullable=False, default="SIF")
    file_encoding: Mapped[str] = mapped_column(String(20), nullable=False, default="utf-8")
    format_name: Mapped[str] = mapped_column(String(50), nullable=False)
    format_checksum: Mapped[str] = mapped_column(String(64), nullable=False)
    employer_id: Mapped[str] = mapped_column(String(50), nullable=False)
    establishment_id: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_employees: Mapped[int] = mapped_column(nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    content_sha256: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="generated")
    submission_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    bank_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    validation_errors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    processing_errors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    generated_by: Mapped[UUID] = mapped_column(nullable=False)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "batch_id", "file_name", "content_sha256", name="uq_wps_file_batch_content"
        ),
        Index("idx_wps_files_batch", "batch_id"),
        Index("idx_wps_files_company", "company_id"),
        Index("idx_wps_files_status", "status"),
    )

    def to_dto(self):
        from wps_modules.wage_file.models import WageFileRecord, WageFileStatus
        return WageFileRecord(
            id=self.id,
            batch_id=self.batch_id,
            company_id=self.company_id,
            file_name=self.file_name,
            file_content=self.file_content,
            file_format=self.file_format,
            file_encoding=self.file_encoding,
            format_name=self.format_name,
            format_checksum=self.format_checksum,
            employer_id=self.employer_id,
            establishment_id=self.establishment_id,
            payment_date=self.payment_date,
            total_employees=self.total_employees,
            total_amount=self.total_amount,
            content_sha256=self.content_sha256,
            status=WageFileStatus(self.status),
            generated_by=self.generated_by,
            generated_at=_aware(self.generated_at),
            submission_date=_aware(self.submission_date),
            bank_reference=self.bank_reference,
            validation_errors=tuple(self.validation_errors or ()),
            processing_errors=tuple(self.processing_errors or ()),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "WageFileModel":
        return cls(
            id=dto.id,
            batch_id=dto.batch_id,
            company_id=dto.company_id,
            file_name=dto.file_name,
            file_content=dto.file_content,
            file_format=dto.file_format,
            file_encoding=dto.file_encoding,
            format_name=dto.format_name,
            format_checksum=dto.format_checksum,
            employer_id=dto.employer_id,
            establishment_id=dto.establishment_id,
            payment_date=dto.payment_date,
            total_employees=dto.total_employees,
            total_amount=dto.total_amount,
            content_sha256=dto.content_sha256,
            status=dto.status.value if hasattr(dto.status, "value") else dto.status,
            generated_by=dto.generated_by,
            generated_at=dto.generated_at,
            submission_date=dto.submission_date,
            bank_reference=dto.bank_reference,
            validation_errors=list(dto.validation_errors),
            processing_errors=list(dto.processing_errors),
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<WageFileModel {self.file_name}: "
            f"{self.total_employees} employees, {self.total_amount} ({self.status})>"
        )
