"""Command-line interface for the time tracker."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

import typer

from .aggregation import collapse
from .catalog import load_catalog, save_catalog
from .config import DEFAULT_CONFIG, load_config
from .entries import append, last_entry, load_all
from .errors import TimetrackError, TrackingStateError
from .models import IDLE_ACTIVITY_NAME, ActivityEnd, ActivityStart
from .paths import get_activity_file_path, get_config_path, get_entry_file_path
from .periods import Unit, parse_last
from .reporting import (
    build_timesheet,
    default_file_name,
    describe_status,
    format_catalog,
    format_duration,
    format_entries,
    format_summary,
    resolve_output_path,
    write_timesheet,
)
from .table import CharSet, Color, ColorOptions, TableOptions

logger = logging.getLogger(__name__)

app = typer.Typer(help="Track time spent on activities and generate timesheets.")


class TableStyle(str, Enum):
    ascii = "ascii"
    sharp = "sharp"
    rounded = "rounded"


@dataclass(slots=True)
class CliState:
    data_dir: Optional[Path]
    config_path: Path
    table: TableOptions

    @property
    def entry_path(self) -> Path:
        return get_entry_file_path(self.data_dir)

    @property
    def activity_path(self) -> Path:
        return get_activity_file_path(self.data_dir)


@app.callback(no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        envvar="TIMETRACK_DATA_DIR",
        path_type=Path,
        help="Directory holding the activity catalog and entry log.",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        envvar="TIMETRACK_CONFIG",
        path_type=Path,
        help="Location of the TOML config file.",
    ),
    style: TableStyle = typer.Option(
        TableStyle.rounded, "--style", help="Table style for console output."
    ),
    color: bool = typer.Option(False, "--color/--no-color", help="Colorize tables."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    chars = {
        TableStyle.ascii: CharSet.ascii_markdown,
        TableStyle.sharp: CharSet.sharp,
        TableStyle.rounded: CharSet.rounded,
    }[style]()
    colors = ColorOptions(headers=Color.CYAN, lines=Color.BLUE) if color else None
    ctx.obj = CliState(
        data_dir=data_dir,
        config_path=config_path or get_config_path(),
        table=TableOptions(chars=chars, colors=colors),
    )


@contextmanager
def reported_errors() -> Iterator[None]:
    try:
        yield
    except (TimetrackError, OSError) as exc:
        logger.debug("Command failed", exc_info=True)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _now() -> datetime:
    return datetime.now().astimezone()


@app.command()
def start(
    ctx: typer.Context,
    activity: str = typer.Argument(
        IDLE_ACTIVITY_NAME, help="Start tracking time for this activity."
    ),
    attendance: Optional[str] = typer.Option(
        None, "--attendance", "-a", help="Attendance type key from the config."
    ),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="Overrides the activity's default description."
    ),
) -> None:
    """Start tracking time for an activity, ending the previous one."""
    state: CliState = ctx.obj
    with reported_errors():
        config = load_config(state.config_path)
        resolved = load_catalog(state.activity_path).resolve(activity)
        now = _now()
        last = last_entry(state.entry_path)
        if last is not None and last.timestamp > now:
            raise TrackingStateError(
                f"The last entry ({last.timestamp.isoformat()}) lies in the future"
            )
        entry = ActivityStart(
            timestamp=now,
            activity=resolved.full_path,
            attendance_type=config.attendance_label(attendance),
            billing_code=resolved.billing_code,
            description=(
                description if description is not None else resolved.description or ""
            ),
        )
        append(state.entry_path, entry)
    logger.info("Started %s at %s", entry.activity, now.isoformat())
    typer.echo(f"Started {entry.activity} ({entry.billing_code}).")


@app.command()
def end(ctx: typer.Context) -> None:
    """Stop tracking time."""
    state: CliState = ctx.obj
    with reported_errors():
        last = last_entry(state.entry_path)
        if last is None or isinstance(last, ActivityEnd):
            raise TrackingStateError("Not tracking any activity.")
        now = _now()
        if last.timestamp > now:
            raise TrackingStateError(
                f"The last entry ({last.timestamp.isoformat()}) lies in the future"
            )
        append(state.entry_path, ActivityEnd(timestamp=now))
    typer.echo(f"Stopped {last.activity} after {format_duration(now - last.timestamp)}.")


@app.command()
def status(ctx: typer.Context) -> None:
    """Show what is being tracked right now."""
    state: CliState = ctx.obj
    with reported_errors():
        last = last_entry(state.entry_path)
    typer.echo(describe_status(last, _now()))


@app.command()
def show(
    ctx: typer.Context,
    last: str = typer.Option(
        "10", "--last", "-l", help="Entries (10) or period (8h, 3d, 1m) to show."
    ),
) -> None:
    """List recent entries of the log."""
    state: CliState = ctx.obj
    with reported_errors():
        period = parse_last(last)
        entries = load_all(state.entry_path)
        if period.unit is Unit.ENTRIES:
            selected = entries[-period.count:]
        else:
            since = period.back_from(_now())
            selected = [e for e in entries if e.timestamp >= since]
    if not selected:
        typer.echo("No entries recorded for the selected period.")
        return
    typer.echo(format_entries(selected, state.table))


@app.command()
def summary(
    ctx: typer.Context,
    last: str = typer.Option(
        "0d", "--last", "-l", help="Period to summarize, e.g. 0d (today), 7d, 0m."
    ),
) -> None:
    """Print collapsed durations for a period."""
    state: CliState = ctx.obj
    with reported_errors():
        period = parse_last(last)
        entries = load_all(state.entry_path)
        now = _now()
        rows = collapse(entries, period.since(now, entries), now, until=now)
    if not rows:
        typer.echo("No activity recorded for the selected period.")
        return
    typer.echo(format_summary(rows, state.table))


@app.command()
def generate(
    ctx: typer.Context,
    last: str = typer.Option(
        "0m", "--last", "-l", help="Period to report, e.g. 0m (this month) or 14d."
    ),
    stdout: bool = typer.Option(
        False, "--stdout", "-s", help="Print to stdout instead of saving to file."
    ),
    file_path: Optional[Path] = typer.Option(
        None, "--file-path", "-f", path_type=Path, help="Save to a custom file or directory."
    ),
) -> None:
    """Generate a timesheet for a period."""
    state: CliState = ctx.obj
    with reported_errors():
        config = load_config(state.config_path)
        period = parse_last(last)
        entries = load_all(state.entry_path)
        now = _now()
        since = period.since(now, entries)
        rows = collapse(entries, since, now, until=now)
        content = build_timesheet(config, rows)
        if stdout:
            typer.echo(content)
            return
        path = resolve_output_path(file_path, default_file_name(config, since.date()))
        write_timesheet(path, content)
    typer.echo(f"Generated {path}")


@app.command("new")
def new_activity(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Full path of the activity, e.g. project/docs."),
    wbs: str = typer.Argument(..., help="Billing code booked for this activity."),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="Default description for entries."
    ),
) -> None:
    """Define a new trackable activity."""
    state: CliState = ctx.obj
    with reported_errors():
        catalog = load_catalog(state.activity_path)
        activity = catalog.add(path, wbs, description)
        save_catalog(state.activity_path, catalog)
    typer.echo(f"Added {activity.full_path}.")


@app.command("remove")
def remove_activity(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Full path of the activity to remove."),
) -> None:
    """Remove a trackable activity. Past entries are not changed."""
    state: CliState = ctx.obj
    with reported_errors():
        catalog = load_catalog(state.activity_path)
        activity = catalog.remove(path)
        save_catalog(state.activity_path, catalog)
    typer.echo(f"Removed {activity.full_path}.")


@app.command("list")
def list_activities(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Only list below this branch."),
    expand: bool = typer.Option(
        False, "--expand", "-e", help="List every activity by its full path."
    ),
    raw: bool = typer.Option(False, "--raw", "-r", help="Print tab separated lines."),
) -> None:
    """List trackable activities."""
    state: CliState = ctx.obj
    with reported_errors():
        rows = load_catalog(state.activity_path).list_sorted(expand, under=path)
    if raw:
        for row in rows:
            typer.echo("\t".join((row.name, row.billing_code, row.description)))
        return
    typer.echo(format_catalog(rows, state.table))


@app.command("dump-default-config")
def dump_default_config() -> None:
    """Print a reference config file."""
    typer.echo(DEFAULT_CONFIG, nl=False)
