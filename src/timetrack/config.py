"""Configuration models and helpers for the time tracker."""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import ConfigError, TemplateEvaluationError
from .templating import compile_template

DEFAULT_CONFIG = """\
# Reference configuration for timetrack.
#
# Templates use {{ variable }} placeholders. Every template may reference
# employee_name, employee_number, cost_center, performance_type and
# accounting_cycle. Column values may also use year, month, day, hours,
# minutes, seconds, attendance_type, description and wbs. The file name may
# use year, month and day of the first reported day.

employee_name = "Jane Doe"
employee_number = "000000"
cost_center = "0000"
performance_type = "Regular"
accounting_cycle = "monthly"

# Attendance type used by `timetrack start` unless --attendance is given.
default_attendance = "office"

# Attendance keys accepted on the command line and the label recorded for each.
[attendance_types]
office = "Office"
remote = "Remote"

[output]
upload_destination = ""
file_name_format = "timesheet_{{ employee_number }}_{{ year }}-{{ month }}.csv"
delimiter = ";"
keys = ["Date", "Employee", "Cost center", "WBS", "Attendance", "Description", "Hours"]
values = [
    "{{ year }}-{{ month }}-{{ day }}",
    "{{ employee_number }}",
    "{{ cost_center }}",
    "{{ wbs }}",
    "{{ attendance_type }}",
    "{{ description }}",
    "{{ hours }}",
]
"""


class OutputConfig(BaseModel):
    """Where and how timesheets are written."""

    upload_destination: str = ""
    file_name_format: str
    keys: list[str]
    values: list[str]
    delimiter: str = ";"

    model_config = ConfigDict(extra="forbid")

    @field_validator("file_name_format")
    @classmethod
    def check_file_name(cls, value: str) -> str:
        _check_template(value)
        return value

    @field_validator("values")
    @classmethod
    def check_values(cls, values: list[str]) -> list[str]:
        for value in values:
            _check_template(value)
        return values

    @model_validator(mode="after")
    def check_columns(self) -> "OutputConfig":
        if len(self.keys) != len(self.values):
            raise ValueError(
                f"output has {len(self.keys)} keys but {len(self.values)} values"
            )
        return self


class Config(BaseModel):
    employee_name: str
    employee_number: str
    cost_center: str
    performance_type: str
    accounting_cycle: str
    default_attendance: str
    attendance_types: dict[str, str] = Field(default_factory=dict)
    output: OutputConfig

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_default_attendance(self) -> "Config":
        if self.default_attendance not in self.attendance_types:
            raise ValueError(
                f"default_attendance {self.default_attendance!r} "
                "is not one of the attendance_types"
            )
        return self

    def attendance_label(self, key: str | None = None) -> str:
        """Map an attendance key to the label stored in the log."""
        key = key or self.default_attendance
        try:
            return self.attendance_types[key]
        except KeyError:
            known = ", ".join(sorted(self.attendance_types)) or "none"
            raise ConfigError(
                f"Unknown attendance type {key!r} (configured: {known})"
            ) from None


def parse_config(text: str, source: Path | str = "<config>") -> Config:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse {source}: {exc}") from exc
    try:
        return Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {source}:\n{exc}") from exc


def load_config(path: Path) -> Config:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(
            f"Failed to read config: {path} does not exist.\n"
            "You can generate a reference config with:\n"
            f"  $ mkdir -p {path.parent}\n"
            f"  $ timetrack dump-default-config > {path}"
        ) from None
    return parse_config(text, source=path)


def _check_template(value: str) -> None:
    try:
        compile_template(value)
    except TemplateEvaluationError as exc:
        raise ValueError(str(exc)) from exc
