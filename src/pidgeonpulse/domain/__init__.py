"""Domain layer for PidgeonPulse.

Contains the test-unit state machine, assertion primitives and failure
records. This package is deliberately free of threading and I/O concerns.

Dependency rule: do not import from `pidgeonpulse.adapters`,
`pidgeonpulse.service_layer` or `pidgeonpulse.entrypoints`.
"""

from .errors import DomainError, InvalidStateError, PidgeonPulseError
from .failures import FailureRecord
from .state import TestState, transition
from .unit import FunctionTestUnit, TestUnit

__all__ = [
    "DomainError",
    "FailureRecord",
    "FunctionTestUnit",
    "InvalidStateError",
    "PidgeonPulseError",
    "TestState",
    "TestUnit",
    "transition",
]
