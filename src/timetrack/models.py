"""Domain models for tracked activity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

IDLE_ACTIVITY_NAME = "Idle"
IDLE_ACTIVITY_WBS = "Idle"
PATH_SEPARATOR = "/"


@dataclass(frozen=True, slots=True)
class Activity:
    """A trackable activity defined in the catalog."""

    path: tuple[str, ...]
    name: str
    billing_code: str
    description: Optional[str] = None

    @classmethod
    def builtin_idle(cls) -> "Activity":
        return cls(path=(), name=IDLE_ACTIVITY_NAME, billing_code=IDLE_ACTIVITY_WBS)

    @property
    def segments(self) -> tuple[str, ...]:
        return (*self.path, self.name)

    @property
    def full_path(self) -> str:
        return PATH_SEPARATOR.join(self.segments)

    @property
    def is_builtin(self) -> bool:
        return self.segments == (IDLE_ACTIVITY_NAME,)


@dataclass(frozen=True, slots=True)
class ActivityStart:
    """Start tracking an activity; the previous one ends at the same time."""

    timestamp: datetime
    activity: str
    attendance_type: str
    billing_code: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class ActivityEnd:
    """Stop tracking without starting anything new."""

    timestamp: datetime


Entry = Union[ActivityStart, ActivityEnd]


@dataclass(slots=True)
class CollapsedActivity:
    """Time spent on the same billing code, attendance type and description
    during a single local day."""

    billing_code: str
    attendance_type: str
    description: str
    start_of_first: datetime
    duration: timedelta = timedelta(0)

    @property
    def duration_seconds(self) -> float:
        return self.duration.total_seconds()


@dataclass(frozen=True, slots=True)
class CatalogRow:
    name: str
    billing_code: str = ""
    description: str = ""
