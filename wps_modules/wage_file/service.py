"""
Wage File Service (``wps_modules.wage_file.service``).

Responsibility
--------------
The calling layer around the pure encoder: enforces the approved-batch
precondition, encodes, persists the generated file for audit, deduplicates
regeneration, and moves stored files through their bank submission
lifecycle.

Architecture position
---------------------
**Modules layer** -- ``WageFileService`` is the sole public entry point for
stored wage files.  It composes the stateless ``WageFileEncoder`` and the
``WageFileModel`` ORM model.

Invariants enforced
-------------------
* Each public mutating method owns the transaction boundary
  (``commit`` on success, ``rollback`` and re-raise on failure).
* A file is generated only for a batch in a payable status.
* Line items that name another batch are rejected.
* Regenerating with identical inputs returns the stored record.
* Lifecycle actions follow ``WAGE_FILE_WORKFLOW``.

Failure modes
-------------
* ``BatchNotApprovedError`` -- batch status is not payable.
* Encoder errors (``InvalidRequestError``, ``InvalidLineItemError``, ...)
  propagate unchanged; nothing is persisted.
* ``WageFileNotFoundError``, ``InvalidStatusTransitionError``,
  ``WageFileNotDownloadableError`` for stored-file operations.

Usage::

    service = WageFileService(session, config=get_format_config(), clock=clock)
    record = service.generate(
        batch, line_items, employer_id="1000000001",
        establishment_id="2000000002", actor_id=actor_id,
    )
    file_name, payload = service.download(record.id)
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Sequence
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from wps_config.schema import WageFormatConfig
from wps_kernel.domain.clock import Clock, SystemClock
from wps_kernel.exceptions import (
    BatchNotApprovedError,
    InvalidLineItemError,
    InvalidStatusTransitionError,
    WageFileNotDownloadableError,
    WageFileNotFoundError,
)
from wps_kernel.logging_config import LogContext, get_logger
from wps_modules.wage_file.encoder import WageFileEncoder
from wps_modules.wage_file.models import (
    PayrollBatch,
    PayrollLineItem,
    WageFileRecord,
    WageFileRequest,
    WageFileStatus,
)
from wps_modules.wage_file.orm import WageFileModel
from wps_modules.wage_file.workflows import (
    BANK_OUTCOME_ACTIONS,
    NON_DOWNLOADABLE_STATUSES,
    WAGE_FILE_WORKFLOW,
)

logger = get_logger("modules.wage_file.service")


class WageFileService:
    """
    Generates, stores and tracks wage protection files.

    Transaction boundary: this service commits on success, rolls back on
    failure.  The clock is injectable for deterministic testing.
    """

    def __init__(
        self,
        session: Session,
        config: WageFormatConfig | None = None,
        clock: Clock | None = None,
        encoder: WageFileEncoder | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._encoder = encoder or WageFileEncoder(config)

    @property
    def config(self) -> WageFormatConfig:
        return self._encoder.config

    # =========================================================================
    # Generation
    # =========================================================================

    def generate(
        self,
        batch: PayrollBatch,
        line_items: Sequence[PayrollLineItem],
        employer_id: str,
        establishment_id: str,
        actor_id: UUID,
    ) -> WageFileRecord:
        """
        Encode an approved batch and store the result.

        Returns the stored record; if an identical file was already stored
        for the batch, that record is returned and nothing is inserted.
        """
        with LogContext.bind(
            batch_id=str(batch.id),
            company_id=str(batch.company_id),
            actor_id=str(actor_id),
        ):
            logger.info(
                "wage_file_generation_started",
                extra={"batch_status": batch.status.value, "line_item_count": len(line_items)},
            )
            if not batch.is_payable:
                raise BatchNotApprovedError(str(batch.id), batch.status.value)
            for index, item in enumerate(line_items):
                if item.batch_id is not None and item.batch_id != batch.id:
                    raise InvalidLineItemError(
                        index, "batch_id", f"belongs to batch {item.batch_id}"
                    )

            wage_file = self._encoder.encode(
                WageFileRequest.from_batch(batch, line_items, employer_id, establishment_id)
            )
            digest = hashlib.sha256(wage_file.to_bytes()).hexdigest()

            try:
                existing = self._session.scalars(
                    select(WageFileModel).where(
                        WageFileModel.batch_id == batch.id,
                        WageFileModel.file_name == wage_file.file_name,
                        WageFileModel.content_sha256 == digest,
                    )
                ).first()
                if existing is not None:
                    logger.info(
                        "wage_file_regenerated_unchanged",
                        extra={"file_id": str(existing.id), "file_name": existing.file_name},
                    )
                    return existing.to_dto()

                model = WageFileModel(
                    id=uuid4(),
                    batch_id=batch.id,
                    company_id=batch.company_id,
                    file_name=wage_file.file_name,
                    file_content=wage_file.content,
                    file_format=self.config.file_format,
                    file_encoding=wage_file.encoding,
                    format_name=wage_file.format_name,
                    format_checksum=self.config.checksum,
                    employer_id=employer_id.strip(),
                    establishment_id=establishment_id.strip(),
                    payment_date=wage_file.payment_date,
                    total_employees=wage_file.record_count,
                    total_amount=wage_file.total_amount,
                    content_sha256=digest,
                    status=WageFileStatus.GENERATED.value,
                    validation_errors=[w.to_dict() for w in wage_file.warnings],
                    processing_errors=[],
                    generated_by=actor_id,
                    generated_at=self._clock.now(),
                    created_by_id=actor_id,
                )
                self._session.add(model)
                self._session.flush()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "wage_file_stored",
                extra={
                    "file_id": str(model.id),
                    "file_name": model.file_name,
                    "total_employees": model.total_employees,
                    "total_amount": str(model.total_amount),
                    "warning_count": len(wage_file.warnings),
                },
            )
            return model.to_dto()

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, file_id: UUID) -> WageFileRecord:
        return self._load(file_id).to_dto()

    def list_for_batch(self, batch_id: UUID) -> tuple[WageFileRecord, ...]:
        models = self._session.scalars(
            select(WageFileModel)
            .where(WageFileModel.batch_id == batch_id)
            .order_by(WageFileModel.generated_at, WageFileModel.file_name)
        ).all()
        return tuple(m.to_dto() for m in models)

    def download(self, file_id: UUID) -> tuple[str, bytes]:
        """File name and encoded payload, for download or bank transmission."""
        model = self._load(file_id)
        status = WageFileStatus(model.status)
        if status in NON_DOWNLOADABLE_STATUSES:
            raise WageFileNotDownloadableError(str(file_id), status.value)
        logger.info("wage_file_downloaded", extra={"file_id": str(file_id)})
        return model.file_name, model.file_content.encode(model.file_encoding)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def submit(
        self,
        file_id: UUID,
        actor_id: UUID,
        bank_reference: str | None = None,
    ) -> WageFileRecord:
        """Mark a generated file as submitted to the bank."""
        def apply(model: WageFileModel) -> None:
            model.submission_date = self._clock.now()
            if bank_reference is not None:
                model.bank_reference = bank_reference

        return self._transition(file_id, "submit", actor_id, apply)

    def record_bank_outcome(
        self,
        file_id: UUID,
        actor_id: UUID,
        outcome: WageFileStatus | str,
        errors: Iterable[str] = (),
    ) -> WageFileRecord:
        """Record the bank's answer: approved, rejected or processed."""
        try:
            action = BANK_OUTCOME_ACTIONS.get(WageFileStatus(outcome))
        except ValueError:
            action = None
        if action is None:
            current = self._load(file_id).status
            raise InvalidStatusTransitionError(
                str(file_id), current, getattr(outcome, "value", str(outcome))
            )
        reported = [str(e) for e in errors]

        def apply(model: WageFileModel) -> None:
            if reported:
                model.processing_errors = [*(model.processing_errors or []), *reported]

        return self._transition(file_id, action, actor_id, apply)

    def _transition(self, file_id, action, actor_id, apply) -> WageFileRecord:
        try:
            model = self._load(file_id)
            transition = WAGE_FILE_WORKFLOW.find_transition(model.status, action)
            if transition is None:
                raise InvalidStatusTransitionError(str(file_id), model.status, action)

            apply(model)
            model.status = transition.to_state
            model.updated_by_id = actor_id
            self._session.flush()
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "wage_file_status_changed",
            extra={
                "file_id": str(file_id),
                "action": action,
                "from_status": transition.from_state,
                "to_status": transition.to_state,
                "actor_id": str(actor_id),
            },
        )
        return model.to_dto()

    def _load(self, file_id: UUID) -> WageFileModel:
        model = self._session.get(WageFileModel, file_id)
        if model is None:
            raise WageFileNotFoundError(str(file_id))
        return model
