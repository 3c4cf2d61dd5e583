"""Wage File Workflows.

Lifecycle of a generated wage file once it leaves the encoder:
generated -> submitted -> approved -> processed, or submitted -> rejected.
"""

from wps_kernel.domain.workflow import Transition, Workflow
from wps_kernel.logging_config import get_logger
from wps_modules.wage_file.models import WageFileStatus

logger = get_logger("modules.wage_file.workflows")

_GENERATED = WageFileStatus.GENERATED.value
_SUBMITTED = WageFileStatus.SUBMITTED.value
_APPROVED = WageFileStatus.APPROVED.value
_REJECTED = WageFileStatus.REJECTED.value
_PROCESSED = WageFileStatus.PROCESSED.value

WAGE_FILE_WORKFLOW = Workflow(
    name="wage_file",
    description="Wage protection file submission to the disbursing bank",
    initial_state=_GENERATED,
    states=(_GENERATED, _SUBMITTED, _APPROVED, _REJECTED, _PROCESSED),
    transitions=(
        Transition(_GENERATED, _SUBMITTED, action="submit"),
        Transition(_SUBMITTED, _APPROVED, action="approve"),
        Transition(_SUBMITTED, _REJECTED, action="reject"),
        Transition(_APPROVED, _PROCESSED, action="process"),
    ),
    terminal_states=(_REJECTED, _PROCESSED),
)

# Bank outcome -> workflow action
BANK_OUTCOME_ACTIONS = {
    WageFileStatus.APPROVED: "approve",
    WageFileStatus.REJECTED: "reject",
    WageFileStatus.PROCESSED: "process",
}

# A rejected file may not be offered for download or transmission.
NON_DOWNLOADABLE_STATUSES = frozenset({WageFileStatus.REJECTED})

logger.debug(
    "wage_file_workflow_defined",
    extra={"workflow": WAGE_FILE_WORKFLOW.name, "states": list(WAGE_FILE_WORKFLOW.states)},
)
