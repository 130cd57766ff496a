"""Collapse the entry log into per-day timesheet rows."""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional

from .models import ActivityStart, CollapsedActivity, Entry

GroupKey = tuple[str, str, str, date]


def group_key(entry: ActivityStart, tz: Optional[tzinfo] = None) -> GroupKey:
    """Rows share billing code, attendance type, description and local date."""
    return (
        entry.billing_code,
        entry.attendance_type,
        entry.description,
        entry.timestamp.astimezone(tz).date(),
    )


def collapse(
    entries: Iterable[Entry],
    start: datetime,
    end: datetime,
    *,
    until: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[CollapsedActivity]:
    """Sum the intervals between consecutive entries inside ``[start, end)``.

    Each interval is credited to the activity that opened it and ends at the
    next entry. Intervals whose closing entry lies at or after ``end`` are left
    out. An activity that is still running at the end of the log only counts
    when ``until`` is given, up to ``min(until, end)``.
    """
    groups: dict[GroupKey, CollapsedActivity] = {}
    previous: Optional[ActivityStart] = None
    reached_end = False
    for current in entries:
        if current.timestamp < start:
            continue
        if current.timestamp >= end:
            reached_end = True
            break
        if previous is not None:
            _credit(groups, previous, current.timestamp, tz)
        previous = current if isinstance(current, ActivityStart) else None

    if previous is not None and not reached_end and until is not None:
        closing = min(until, end)
        if closing > previous.timestamp:
            _credit(groups, previous, closing, tz)

    return sorted(groups.values(), key=lambda row: row.start_of_first)


def total_duration(rows: Iterable[CollapsedActivity]) -> timedelta:
    return sum((row.duration for row in rows), timedelta(0))


def _credit(
    groups: dict[GroupKey, CollapsedActivity],
    opened_by: ActivityStart,
    closed_at: datetime,
    tz: Optional[tzinfo],
) -> None:
    key = group_key(opened_by, tz)
    row = groups.get(key)
    if row is None:
        row = groups[key] = CollapsedActivity(
            billing_code=opened_by.billing_code,
            attendance_type=opened_by.attendance_type,
            description=opened_by.description,
            start_of_first=opened_by.timestamp,
        )
    row.duration += closed_at - opened_by.timestamp
