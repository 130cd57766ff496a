"""Timesheet assembly and console summaries."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .aggregation import total_duration
from .config import Config
from .errors import OutputExistsError
from .models import ActivityEnd, CatalogRow, CollapsedActivity, Entry
from .table import TableOptions, render_table
from .templating import evaluate

logger = logging.getLogger(__name__)

NONE_PRINT_VALUE = "-"
LINE_SEPARATOR = "\r\n"


def vars_from_config(config: Config) -> dict[str, str]:
    return {
        "employee_name": config.employee_name,
        "employee_number": config.employee_number,
        "cost_center": config.cost_center,
        "performance_type": config.performance_type,
        "accounting_cycle": config.accounting_cycle,
    }


def _date_vars(day: date) -> dict[str, str]:
    return {
        "year": str(day.year),
        "month": f"{day.month:02d}",
        "day": f"{day.day:02d}",
    }


def vars_for_collapsed_activity(
    activity: CollapsedActivity, config: Optional[Config] = None
) -> dict[str, str]:
    seconds = activity.duration_seconds
    variables = vars_from_config(config) if config else {}
    variables.update(_date_vars(activity.start_of_first.astimezone().date()))
    variables.update(
        {
            "hours": f"{seconds / 3600:.2f}",
            "minutes": f"{seconds / 60:.2f}",
            "seconds": f"{seconds:.2f}",
            "attendance_type": activity.attendance_type,
            "description": activity.description,
            "wbs": activity.billing_code,
        }
    )
    return variables


def vars_for_generated_file(config: Config, day: date) -> dict[str, str]:
    variables = vars_from_config(config)
    variables.update(_date_vars(day))
    return variables


def build_timesheet(config: Config, rows: Iterable[CollapsedActivity]) -> str:
    """Render the header and one delimited line per collapsed activity."""
    output = config.output
    lines = [output.delimiter.join(output.keys)]
    for row in rows:
        variables = vars_for_collapsed_activity(row, config)
        lines.append(
            output.delimiter.join(evaluate(value, variables) for value in output.values)
        )
    return LINE_SEPARATOR.join(lines)


def default_file_name(config: Config, day: date) -> str:
    return evaluate(config.output.file_name_format, vars_for_generated_file(config, day))


def resolve_output_path(requested: Optional[Path], default_name: str) -> Path:
    """Pick the report path, never overwriting an existing file."""
    path = Path(requested) if requested else Path(default_name)
    if path.is_dir():
        path = path / default_name
    if path.exists():
        raise OutputExistsError(f"{path} already exists")
    return path


def write_timesheet(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("x", encoding="utf-8", newline="") as handle:
        handle.write(content + LINE_SEPARATOR)
    logger.info("Wrote timesheet to %s", path)


def format_duration(duration: timedelta) -> str:
    total_seconds = int(round(duration.total_seconds()))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_summary(
    rows: Sequence[CollapsedActivity], options: Optional[TableOptions] = None
) -> str:
    table_rows = [
        [
            row.start_of_first.astimezone().strftime("%Y-%m-%d"),
            row.billing_code,
            row.attendance_type,
            row.description or NONE_PRINT_VALUE,
            format_duration(row.duration),
        ]
        for row in rows
    ]
    table = render_table(
        ["Date", "WBS", "Attendance", "Description", "Duration"], table_rows, options
    )
    return f"{table}\n\nTotal: {format_duration(total_duration(rows))}"


def format_entries(
    entries: Sequence[Entry], options: Optional[TableOptions] = None
) -> str:
    table_rows = []
    for entry in entries:
        when = entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        if isinstance(entry, ActivityEnd):
            table_rows.append([when, "(end)", *[NONE_PRINT_VALUE] * 3])
            continue
        table_rows.append(
            [
                when,
                entry.activity,
                entry.attendance_type,
                entry.billing_code,
                entry.description or NONE_PRINT_VALUE,
            ]
        )
    return render_table(
        ["Time", "Activity", "Attendance", "WBS", "Description"], table_rows, options
    )


def format_catalog(
    rows: Sequence[CatalogRow], options: Optional[TableOptions] = None
) -> str:
    table_rows = [
        [
            row.name,
            row.billing_code or NONE_PRINT_VALUE,
            row.description or NONE_PRINT_VALUE,
        ]
        for row in rows
    ]
    return render_table(["Name", "WBS", "Default Description"], table_rows, options)


def describe_status(last: Optional[Entry], now: datetime) -> str:
    if last is None or isinstance(last, ActivityEnd):
        return "Not tracking any activity."
    elapsed = format_duration(now - last.timestamp)
    return (
        f"Tracking {last.activity} ({last.billing_code}, {last.attendance_type}) "
        f"for {elapsed}"
        + (f": {last.description}" if last.description else "")
    )
