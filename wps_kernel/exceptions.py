"""
Typed Exception Hierarchy for wage protection file generation.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A wage file is an atomic financial submission. When it cannot be produced,
the operator has to be pointed at the exact constraint that failed and, for
per-employee problems, at the exact payroll row. Parsing message strings for
that is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (index, field, status, ...)

Example:
    try:
        wage_file = encoder.encode(request)
    except InvalidLineItemError as e:
        highlight_row(e.index, e.field)           # Structured data
        api_response(code=e.code, row=e.index)    # Machine-readable

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from WpsKernelError:

    WpsKernelError (base)
    |
    +-- WageFileError
    |   +-- InvalidRequestError
    |   +-- InvalidLineItemError
    |   +-- WageFileConsistencyError
    |   +-- MalformedWageFileError
    |   +-- FieldOverflowError
    |
    +-- ConfigError
    |   +-- InvalidFormatConfigError
    |   +-- FormatVariantNotFoundError
    |
    +-- BatchError
    |   +-- BatchNotApprovedError
    |
    +-- WageFileRecordError
        +-- WageFileNotFoundError
        +-- InvalidStatusTransitionError
        +-- WageFileNotDownloadableError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Wage file       | INVALID_REQUEST             | Missing employer/establishment id,
                |                             | empty line items, bad payment date
                | INVALID_LINE_ITEM           | One line item breaks a record rule
                | WAGE_FILE_INCONSISTENT      | Rendered amounts != total amount
                | MALFORMED_WAGE_FILE         | Decoded record breaks the layout
                | FIELD_OVERFLOW              | Number does not fit its field width
----------------|-----------------------------|-----------------------------------------
Config          | INVALID_FORMAT_CONFIG       | Format variant fails validation
                | FORMAT_VARIANT_NOT_FOUND    | No bundled variant with that name
----------------|-----------------------------|-----------------------------------------
Batch           | BATCH_NOT_APPROVED          | Batch status is not payable
----------------|-----------------------------|-----------------------------------------
Stored file     | WAGE_FILE_NOT_FOUND         | Wage file ID doesn't exist
                | INVALID_STATUS_TRANSITION   | Lifecycle action not allowed
                | WAGE_FILE_NOT_DOWNLOADABLE  | File was rejected by the bank

===============================================================================
PROPAGATION
===============================================================================

Structural errors (InvalidRequestError) abort before any record is rendered.
Per-row errors (InvalidLineItemError) also abort the whole batch: silently
dropping one employee from a pay run is worse than rejecting the batch.
Truncation is NOT an exception; it is returned as a warning alongside a
successful result.
"""


class WpsKernelError(Exception):
    """
    Base exception for all wage file errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "WPS_KERNEL_ERROR"


# Wage file encoding / decoding


class WageFileError(WpsKernelError):
    """Base exception for encoding and decoding errors."""

    code: str = "WAGE_FILE_ERROR"


class InvalidRequestError(WageFileError):
    """The request envelope is structurally invalid. Nothing was rendered."""

    code: str = "INVALID_REQUEST"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid wage file request ({field}): {reason}")


class InvalidLineItemError(WageFileError):
    """
    A specific line item fails a per-record constraint.

    ``index`` is 0-based so the caller can point the operator at the exact
    payroll row.
    """

    code: str = "INVALID_LINE_ITEM"

    def __init__(self, index: int, field: str, reason: str):
        self.index = index
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid line item {index} ({field}): {reason}")


class WageFileConsistencyError(WageFileError):
    """
    The minor units rendered into the records do not add up to the total.

    Reachable from rows that are each valid on their own: amounts finer
    than the minor unit are rounded per record, and when several round in
    the same direction the file would disagree with the batch total (two
    rows of 0.005 render as 2 cents against an exact total of 1 cent).
    ``rounded_indices`` lists the 0-based rows whose amounts were rounded;
    correcting those rows to whole minor units resolves the error.
    """

    code: str = "WAGE_FILE_INCONSISTENT"

    def __init__(
        self,
        expected_minor_units: int,
        rendered_minor_units: int,
        rounded_indices: tuple[int, ...] = (),
    ):
        self.expected_minor_units = expected_minor_units
        self.rendered_minor_units = rendered_minor_units
        self.rounded_indices = tuple(rounded_indices)
        message = (
            f"Rendered amounts sum to {rendered_minor_units} minor units, "
            f"expected {expected_minor_units}"
        )
        if self.rounded_indices:
            rows = ", ".join(str(i) for i in self.rounded_indices)
            message += f"; line items with sub-minor-unit amounts: {rows}"
        super().__init__(message)


class MalformedWageFileError(WageFileError):
    """A record read back from a wage file does not match the layout."""

    code: str = "MALFORMED_WAGE_FILE"

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Malformed wage file record at line {line_number}: {reason}")


class FieldOverflowError(WageFileError):
    """A numeric value does not fit its fixed-width field."""

    code: str = "FIELD_OVERFLOW"

    def __init__(self, width: int, value: int):
        self.width = width
        self.value = value
        super().__init__(f"Value {value} does not fit a {width}-digit field")


# Configuration


class ConfigError(WpsKernelError):
    """Base exception for format variant configuration errors."""

    code: str = "CONFIG_ERROR"


class InvalidFormatConfigError(ConfigError):
    """A format variant fails validation."""

    code: str = "INVALID_FORMAT_CONFIG"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid format config ({field}): {reason}")


class FormatVariantNotFoundError(ConfigError):
    """No bundled format variant exists with the given name."""

    code: str = "FORMAT_VARIANT_NOT_FOUND"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Format variant not found: {name}")


# Payroll batch


class BatchError(WpsKernelError):
    """Base exception for payroll batch errors."""

    code: str = "BATCH_ERROR"


class BatchNotApprovedError(BatchError):
    """A wage file was requested for a batch that is not approved yet."""

    code: str = "BATCH_NOT_APPROVED"

    def __init__(self, batch_id: str, status: str):
        self.batch_id = batch_id
        self.status = status
        super().__init__(
            f"Payroll batch {batch_id} has status '{status}'; "
            "a wage file requires an approved batch"
        )


# Stored wage files


class WageFileRecordError(WpsKernelError):
    """Base exception for persisted wage file errors."""

    code: str = "WAGE_FILE_RECORD_ERROR"


class WageFileNotFoundError(WageFileRecordError):
    """Wage file with given ID was not found."""

    code: str = "WAGE_FILE_NOT_FOUND"

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"Wage file not found: {file_id}")


class InvalidStatusTransitionError(WageFileRecordError):
    """The lifecycle action is not allowed from the file's current status."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, file_id: str, current_status: str, action: str):
        self.file_id = file_id
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Cannot '{action}' wage file {file_id} in status '{current_status}'"
        )


class WageFileNotDownloadableError(WageFileRecordError):
    """The file may not be offered for download or transmission."""

    code: str = "WAGE_FILE_NOT_DOWNLOADABLE"

    def __init__(self, file_id: str, status: str):
        self.file_id = file_id
        self.status = status
        super().__init__(f"Wage file {file_id} in status '{status}' cannot be downloaded")
