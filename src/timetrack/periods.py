"""Parsing of ``--last`` values such as ``10``, ``8h``, ``3d`` or ``0m``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Sequence

from .errors import PeriodError
from .models import Entry

_LAST_PATTERN = re.compile(r"^(\d*)([a-z]*)$")


class Unit(str, Enum):
    ENTRIES = "entries"
    HOURS = "hours"
    DAYS = "days"
    MONTHS = "months"


_POSTFIXES: dict[str, Unit] = {
    "": Unit.ENTRIES,
    "h": Unit.HOURS,
    "hour": Unit.HOURS,
    "hours": Unit.HOURS,
    "d": Unit.DAYS,
    "day": Unit.DAYS,
    "days": Unit.DAYS,
    "m": Unit.MONTHS,
    "month": Unit.MONTHS,
    "months": Unit.MONTHS,
}


@dataclass(frozen=True, slots=True)
class LastValue:
    count: int
    unit: Unit

    def back_from(self, now: datetime) -> datetime:
        """Return the start of the period ending at ``now``.

        Days and months snap to local midnight, so ``0d`` is today and ``0m``
        is the current month.
        """
        if self.unit is Unit.HOURS:
            elapsed = now.astimezone(timezone.utc) - timedelta(hours=self.count)
            return elapsed.astimezone(now.tzinfo)
        if self.unit is Unit.DAYS:
            return _midnight(now.date() - timedelta(days=self.count), now)
        if self.unit is Unit.MONTHS:
            year, month = divmod(now.year * 12 + now.month - 1 - self.count, 12)
            return _midnight(date(year, month + 1, 1), now)
        raise PeriodError(f"{self} counts entries, not time")

    def since(self, now: datetime, entries: Sequence[Entry]) -> datetime:
        """Start of the period, counting entries back from the end of the log."""
        if self.unit is not Unit.ENTRIES:
            return self.back_from(now)
        if not entries:
            return now
        return entries[max(len(entries) - self.count, 0)].timestamp

    def __str__(self) -> str:
        if self.unit is Unit.ENTRIES:
            return str(self.count)
        return f"{self.count}{self.unit.value[0]}"


def _midnight(day: date, now: datetime) -> datetime:
    """Start of ``day`` in the zone ``now`` was taken in.

    A fixed offset matching the system zone (as from ``datetime.now().astimezone()``)
    stands for the system zone, whose offset may differ on ``day``.
    """
    system_offset = now.astimezone().utcoffset()
    if isinstance(now.tzinfo, timezone) and now.utcoffset() == system_offset:
        return datetime.combine(day, time()).astimezone()
    return datetime.combine(day, time(), tzinfo=now.tzinfo)


def parse_last(value: str) -> LastValue:
    match = _LAST_PATTERN.match(value.strip().lower())
    if match is None:
        raise PeriodError(f"Invalid number in {value!r}")
    number, postfix = match.groups()
    count = int(number) if number else 0
    unit = _POSTFIXES.get(postfix)
    if unit is None:
        raise PeriodError(f"Invalid postfix {postfix!r}")
    if unit is Unit.ENTRIES and count == 0:
        raise PeriodError("Cannot show 0 individual entries")
    return LastValue(count=count, unit=unit)
