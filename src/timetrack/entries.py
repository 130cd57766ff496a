"""Reading and writing the append-only entry log.

Every line records one transition::

    <ISO-8601 time stamp><TAB><activity path><TAB><attendance><TAB><wbs><TAB><description>
    <ISO-8601 time stamp><TAB>__END
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .errors import (
    InvalidFieldError,
    InvalidTimestamp,
    MissingActivityName,
    MissingAttendanceType,
    MissingBillingCode,
    MissingTimestamp,
    OutOfOrderError,
    ParseError,
)
from .models import ActivityEnd, ActivityStart, Entry

logger = logging.getLogger(__name__)

END_SENTINEL = "__END"
FIELD_SEPARATOR = "\t"


def parse_line(line: str) -> Entry:
    fields = line.split(FIELD_SEPARATOR)
    raw_timestamp = fields[0]
    if not raw_timestamp:
        raise MissingTimestamp(line)
    if len(fields) < 2 or not fields[1]:
        raise MissingActivityName(line)
    timestamp = parse_timestamp(raw_timestamp, line)

    activity = fields[1]
    if activity == END_SENTINEL:
        return ActivityEnd(timestamp=timestamp)
    if len(fields) < 3:
        raise MissingAttendanceType(line)
    if len(fields) < 4:
        raise MissingBillingCode(line)
    return ActivityStart(
        timestamp=timestamp,
        activity=activity,
        attendance_type=fields[2],
        billing_code=fields[3],
        description=fields[4] if len(fields) > 4 else "",
    )


def parse_timestamp(value: str, line: Optional[str] = None) -> datetime:
    try:
        timestamp = datetime.fromisoformat(value)
    except ValueError as exc:
        raise InvalidTimestamp(line if line is not None else value, str(exc)) from exc
    if timestamp.tzinfo is None or timestamp.utcoffset() is None:
        raise InvalidTimestamp(line if line is not None else value, "no UTC offset")
    return timestamp


def format_line(entry: Entry) -> str:
    if entry.timestamp.tzinfo is None:
        raise InvalidFieldError("time stamps must carry a UTC offset")
    timestamp = entry.timestamp.isoformat()
    if isinstance(entry, ActivityEnd):
        return FIELD_SEPARATOR.join((timestamp, END_SENTINEL))

    if not entry.activity or entry.activity == END_SENTINEL:
        raise InvalidFieldError(f"invalid activity name {entry.activity!r}")
    fields = (
        entry.activity,
        entry.attendance_type,
        entry.billing_code,
        entry.description,
    )
    for value in fields:
        if FIELD_SEPARATOR in value or "\n" in value or "\r" in value:
            raise InvalidFieldError(f"{value!r} must not contain tabs or line breaks")
    return FIELD_SEPARATOR.join((timestamp, *fields))


def parse_lines(lines: Iterable[str], source: Optional[Path] = None) -> Iterator[Entry]:
    """Parse log lines in order, skipping blank ones.

    Raises on the first malformed line and on any entry older than its
    predecessor.
    """
    previous: Optional[Entry] = None
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            entry = parse_line(line)
            if previous is not None and entry.timestamp < previous.timestamp:
                raise OutOfOrderError(
                    line, f"previous entry is {previous.timestamp.isoformat()}"
                )
        except ParseError as exc:
            if source is not None:
                exc.locate(source, number)
            raise
        previous = entry
        yield entry


def read_lines(path: Path) -> list[str]:
    """Split a text file on LF only; other Unicode line breaks stay inside fields."""
    with Path(path).open("r", encoding="utf-8", newline="") as handle:
        text = handle.read()
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines and not lines[-1]:
        lines.pop()
    return lines


def load_all(path: Path) -> list[Entry]:
    """Load the whole log; a log that does not exist yet has no entries."""
    path = Path(path)
    if not path.exists():
        logger.debug("No entry log at %s yet.", path)
        return []
    entries = list(parse_lines(read_lines(path), source=path))
    logger.debug("Loaded %d entries from %s", len(entries), path)
    return entries


def last_entry(path: Path) -> Optional[Entry]:
    path = Path(path)
    if not path.exists():
        return None
    last: Optional[tuple[int, str]] = None
    for number, line in enumerate(read_lines(path), start=1):
        if line.strip():
            last = (number, line)
    if last is None:
        return None
    number, line = last
    try:
        return parse_line(line)
    except ParseError as exc:
        raise exc.locate(path, number)


def append(path: Path, entry: Entry) -> None:
    """Append one entry and make sure it reached the disk before returning."""
    path = Path(path)
    line = format_line(entry) + "\n"
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8", newline="\n") as handle:
        handle.write(line)
        handle.flush()
        os.fsync(handle.fileno())
    logger.debug("Appended entry to %s: %s", path, line.rstrip("\n"))
