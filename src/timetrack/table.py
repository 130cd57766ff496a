"""Plain-text tables for console output."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence


class Color(str, Enum):
    NONE = "0"
    RED = "31"
    GREEN = "32"
    YELLOW = "33"
    BLUE = "34"
    MAGENTA = "35"
    CYAN = "36"

    def __str__(self) -> str:
        return f"\x1b[{self.value}m"


@dataclass(frozen=True, slots=True)
class Caps:
    down_right: str
    down_left: str
    up_right: str
    up_left: str
    horizontal_down: str
    horizontal_up: str


@dataclass(frozen=True, slots=True)
class CharSet:
    vertical: str
    horizontal: str
    vertical_right: str
    vertical_left: str
    cross: str
    caps: Optional[Caps] = None

    @classmethod
    def sharp(cls) -> "CharSet":
        caps = Caps("┌", "┐", "└", "┘", "┬", "┴")
        return cls("│", "─", "├", "┤", "┼", caps)

    @classmethod
    def rounded(cls) -> "CharSet":
        caps = Caps("╭", "╮", "╰", "╯", "┬", "┴")
        return cls("│", "─", "├", "┤", "┼", caps)

    @classmethod
    def ascii_markdown(cls) -> "CharSet":
        return cls("|", "-", "|", "|", "|")


@dataclass(frozen=True, slots=True)
class ColorOptions:
    headers: Color = Color.NONE
    lines: Color = Color.NONE


@dataclass(frozen=True, slots=True)
class TableOptions:
    chars: CharSet = field(default_factory=CharSet.ascii_markdown)
    colors: Optional[ColorOptions] = None


def render_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    options: Optional[TableOptions] = None,
) -> str:
    """Render ``rows`` under ``headers``; short rows are padded with blanks."""
    options = options or TableOptions()
    chars = options.chars
    cells = [
        [str(row[i]) if i < len(row) else "" for i in range(len(headers))]
        for row in rows
    ]
    widths = [
        max([len(header), *(len(row[i]) for row in cells)])
        for i, header in enumerate(headers)
    ]
    if options.colors:
        c_header, c_line, c_reset = (
            str(options.colors.headers),
            str(options.colors.lines),
            str(Color.NONE),
        )
    else:
        c_header = c_line = c_reset = ""

    def rule(left: str, middle: str, right: str) -> str:
        segments = [chars.horizontal * (width + 2) for width in widths]
        return c_line + left + middle.join(segments) + right + c_reset

    def line(values: Sequence[str], color: str) -> str:
        parts = [
            f" {color}{value.ljust(width)}{c_reset} {c_line}"
            for value, width in zip(values, widths)
        ]
        return c_line + chars.vertical + chars.vertical.join(parts) + chars.vertical + c_reset

    out = []
    caps = chars.caps
    if caps:
        out.append(rule(caps.down_right, caps.horizontal_down, caps.down_left))
    out.append(line(headers, c_header))
    out.append(rule(chars.vertical_right, chars.cross, chars.vertical_left))
    out.extend(line(row, c_reset) for row in cells)
    if caps:
        out.append(rule(caps.up_right, caps.horizontal_up, caps.up_left))
    return "\n".join(out)
