"""Exception hierarchy for the time tracker."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class TimetrackError(Exception):
    """Base class for every error reported to the user."""


class ParseError(TimetrackError, ValueError):
    """A line of the catalog or entry log could not be parsed."""

    reason = "malformed line"

    def __init__(self, line: str, detail: Optional[str] = None) -> None:
        self.line = line
        self.detail = detail
        self.source: Optional[Path] = None
        self.line_number: Optional[int] = None
        super().__init__(line)

    def locate(self, source: Path, line_number: int) -> "ParseError":
        self.source = Path(source)
        self.line_number = line_number
        return self

    def __str__(self) -> str:
        message = self.reason
        if self.detail:
            message = f"{message}: {self.detail}"
        if self.source is not None:
            return f"{self.source}:{self.line_number}: {message} in {self.line!r}"
        return f"{message} in {self.line!r}"


class MalformedPath(ParseError):
    reason = "malformed activity path"


class EmptyName(ParseError):
    reason = "path doesn't end in a name"


class MissingBillingCode(ParseError):
    reason = "missing billing code"


class MissingTimestamp(ParseError):
    reason = "missing time stamp"


class InvalidTimestamp(ParseError):
    reason = "failed to parse time stamp"


class MissingActivityName(ParseError):
    reason = "missing activity name"


class MissingAttendanceType(ParseError):
    reason = "missing attendance type"


class OutOfOrderError(ParseError):
    reason = "entry is older than the one before it"


class InvalidFieldError(TimetrackError, ValueError):
    """A value cannot be stored in a tab-separated line."""


class CatalogError(TimetrackError):
    """Inconsistent activity catalog operation."""

    source: Optional[Path] = None
    line_number: Optional[int] = None

    def locate(self, source: Path, line_number: int) -> "CatalogError":
        self.source = Path(source)
        self.line_number = line_number
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.source is not None:
            return f"{self.source}:{self.line_number}: {message}"
        return message


class DuplicateNameError(CatalogError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"activity {path!r} already exists")


class NotFoundError(CatalogError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"no activity named {path!r}")


class PathConflictError(CatalogError):
    def __init__(self, path: str, existing: str) -> None:
        self.path = path
        self.existing = existing
        super().__init__(f"activity {path!r} conflicts with {existing!r}")


class ReservedActivityError(CatalogError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"{path!r} is a built-in activity and cannot be changed")


class ConfigError(TimetrackError):
    """The config file is missing or invalid."""


class TemplateEvaluationError(TimetrackError):
    """A format string failed to compile or render."""


class PeriodError(TimetrackError, ValueError):
    """A "last" value could not be parsed."""


class OutputExistsError(TimetrackError):
    """Refusing to overwrite an existing report file."""


class TrackingStateError(TimetrackError):
    """The requested transition does not fit the current tracking state."""
