"""PidgeonPulse

A small unit-test execution engine. Test units carry their own pass/fail
state machine, are grouped into named collections and executed concurrently
by a worker pool, producing an aggregated plain-text report.
"""

__all__ = ["__version__"]
__version__ = "0.2.0"
