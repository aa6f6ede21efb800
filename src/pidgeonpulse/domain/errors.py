"""Domain-layer error definitions."""

# ============================================================================
#                           General errors
# ============================================================================


class PidgeonPulseError(Exception):
    """Base class for all PidgeonPulse errors."""


class DomainError(PidgeonPulseError):
    """Base class for domain-layer errors."""


# ============================================================================
#                       Test unit state errors
# ============================================================================


class InvalidStateError(DomainError):
    """Raised when a test unit is in an invalid state for the attempted action."""


class IllegalTransitionError(InvalidStateError):
    """Raised when a state change is not one of the allowed moves."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move a test from {current} to {target}.")
        self.current = current
        self.target = target


class ResultNotReadyError(InvalidStateError):
    """Raised when a result is queried before the test has finished."""

    def __init__(self, test_name: str, attribute: str) -> None:
        super().__init__(
            f"Test '{test_name}' has not finished yet; {attribute} is unavailable."
        )
        self.test_name = test_name
        self.attribute = attribute


class AlreadyInvokedError(InvalidStateError):
    """Raised when a test unit is invoked more than once."""

    def __init__(self, test_name: str) -> None:
        super().__init__(f"Test '{test_name}' has already been invoked.")
        self.test_name = test_name
