"""Format strings for report file names and timesheet columns."""

from __future__ import annotations

from typing import Mapping

from jinja2 import StrictUndefined, Template, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from .errors import TemplateEvaluationError

_ENV = SandboxedEnvironment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def compile_template(source: str) -> Template:
    try:
        return _ENV.from_string(source)
    except TemplateError as exc:
        raise TemplateEvaluationError(f"Invalid template {source!r}: {exc}") from exc


def evaluate(source: str, variables: Mapping[str, str]) -> str:
    """Render ``source`` with ``variables``; unknown names are an error."""
    template = compile_template(source)
    try:
        return template.render(**variables)
    except TemplateError as exc:
        raise TemplateEvaluationError(f"Failed to evaluate {source!r}: {exc}") from exc
