"""
Wage File Module (``wps_modules.wage_file``).

Responsibility
--------------
Converts an approved payroll batch and its per-employee line items into a
fixed-layout, pipe-delimited wage protection interchange file (SARIE SIF
style), reads such files back, and tracks stored files through their bank
submission lifecycle.

Architecture position
---------------------
**Modules layer** -- a pure encoder/decoder pair driven by an immutable
``WageFormatConfig``, plus a thin ``WageFileService`` owning persistence.

Invariants enforced
-------------------
* One record per line item, in input order; identical input yields
  byte-identical content.
* Amounts are integer minor units rounded half-up; the rendered amounts
  always add up to the exact batch total.
* A partial file is never produced: any invalid row rejects the batch.
* Identifier truncation is always reported as a warning.
"""

from wps_modules.wage_file.decoder import DecodedRecord, WageFileDecoder
from wps_modules.wage_file.encoder import WageFileEncoder
from wps_modules.wage_file.fields import RECORD_FIELDS
from wps_modules.wage_file.helpers import build_file_name, from_minor_units, to_minor_units
from wps_modules.wage_file.models import (
    AccountFallbackWarning,
    BatchStatus,
    EncodingWarning,
    PayrollBatch,
    PayrollLineItem,
    TruncationWarning,
    WageFile,
    WageFileRecord,
    WageFileRequest,
    WageFileStatus,
)
from wps_modules.wage_file.workflows import WAGE_FILE_WORKFLOW

__all__ = [
    "AccountFallbackWarning",
    "BatchStatus",
    "DecodedRecord",
    "EncodingWarning",
    "PayrollBatch",
    "PayrollLineItem",
    "RECORD_FIELDS",
    "TruncationWarning",
    "WAGE_FILE_WORKFLOW",
    "WageFile",
    "WageFileDecoder",
    "WageFileEncoder",
    "WageFileRecord",
    "WageFileRequest",
    "WageFileStatus",
    "build_file_name",
    "from_minor_units",
    "to_minor_units",
]
