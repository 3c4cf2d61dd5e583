"""Pure domain value objects shared by all modules (zero I/O)."""

from wps_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from wps_kernel.domain.workflow import Transition, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Transition",
    "Workflow",
]
