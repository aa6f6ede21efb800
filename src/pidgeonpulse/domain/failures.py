"""Failure records accumulated by a test unit while it runs."""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from pathlib import Path
from types import FrameType, TracebackType


@dataclass(frozen=True, slots=True)
class FailureRecord:
    """One recorded assertion failure or captured error.

    Attributes:
        source_file: Basename of the file the failure was raised from, if known.
        source_line: Line number within ``source_file``, if known.
        captured_error: The exception that caused the failure, if any.
    """

    source_file: str | None = None
    source_line: int | None = None
    captured_error: BaseException | None = None

    @property
    def location(self) -> str | None:
        """``file:line`` when the source location is known, else ``None``."""
        if not self.source_file:
            return None
        if not self.source_line:
            return self.source_file
        return f"{self.source_file}:{self.source_line}"

    @property
    def error_message(self) -> str | None:
        """Human-readable ``Type: message`` of the captured error, if any."""
        if self.captured_error is None:
            return None
        return describe_error(self.captured_error)

    @classmethod
    def from_frame(
        cls, frame: FrameType | None, captured_error: BaseException | None = None
    ) -> FailureRecord:
        """Build a record located at ``frame``'s current line."""
        if frame is None:
            return cls(captured_error=captured_error)
        return cls(
            source_file=Path(frame.f_code.co_filename).name,
            source_line=frame.f_lineno,
            captured_error=captured_error,
        )

    @classmethod
    def from_exception(cls, error: BaseException) -> FailureRecord:
        """Build a record located at the innermost frame of ``error``'s traceback."""
        tb: TracebackType | None = error.__traceback__
        if tb is None:
            return cls(captured_error=error)
        innermost = traceback.extract_tb(tb)[-1]
        return cls(
            source_file=Path(innermost.filename).name,
            source_line=innermost.lineno,
            captured_error=error,
        )


def describe_error(error: BaseException) -> str:
    """Render an exception as ``Type: message`` (or just ``Type`` if empty)."""
    message = str(error)
    name = type(error).__name__
    return f"{name}: {message}" if message else name
