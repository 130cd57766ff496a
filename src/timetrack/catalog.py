"""Hierarchical catalog of trackable activities.

The catalog file holds one activity per line::

    path/to/name<TAB>billing code<TAB>default description

The flat list of activities is the source of truth. The namespace tree is
rebuilt from it whenever a lookup needs it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from .entries import read_lines
from .errors import (
    CatalogError,
    DuplicateNameError,
    EmptyName,
    InvalidFieldError,
    MalformedPath,
    MissingBillingCode,
    NotFoundError,
    ParseError,
    PathConflictError,
    ReservedActivityError,
)
from .models import PATH_SEPARATOR, Activity, CatalogRow

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\t"


def parse_activity_line(line: str) -> Activity:
    if not line:
        raise MalformedPath(line, "no path segments")
    fields = line.split(FIELD_SEPARATOR)
    if len(fields) < 2:
        raise MissingBillingCode(line)
    raw_path, billing_code = fields[0], fields[1]
    description = fields[2] if len(fields) > 2 and fields[2] else None

    *path, name = raw_path.split(PATH_SEPARATOR)
    if not name:
        raise EmptyName(line)
    if not all(path):
        raise MalformedPath(line, "empty namespace segment")
    return Activity(
        path=tuple(path),
        name=name,
        billing_code=billing_code,
        description=description,
    )


def format_activity_line(activity: Activity) -> str:
    return FIELD_SEPARATOR.join(
        (activity.full_path, activity.billing_code, activity.description or "")
    )


def split_path(path: str) -> tuple[str, ...]:
    """Split a ``/``-joined activity path, rejecting empty segments."""
    segments = tuple(path.split(PATH_SEPARATOR))
    if not all(segments):
        raise InvalidFieldError(f"invalid activity path {path!r}")
    return segments


@dataclass
class ActivityCategory:
    """One level of the activity namespace."""

    branches: dict[str, "ActivityCategory"] = field(default_factory=dict)
    leaves: dict[str, Activity] = field(default_factory=dict)

    @classmethod
    def from_activities(cls, activities: Iterable[Activity]) -> "ActivityCategory":
        root = cls()
        for activity in activities:
            root._insert(activity)
        return root

    def _insert(self, activity: Activity) -> None:
        node = self
        for segment in activity.path:
            if segment in node.leaves:
                raise PathConflictError(activity.full_path, node.leaves[segment].full_path)
            node = node.branches.setdefault(segment, ActivityCategory())
        if activity.name in node.branches:
            raise PathConflictError(activity.full_path, activity.full_path + PATH_SEPARATOR)
        if activity.name in node.leaves:
            raise DuplicateNameError(activity.full_path)
        node.leaves[activity.name] = activity

    def find(self, segments: Sequence[str]) -> Optional["ActivityCategory"]:
        node: Optional[ActivityCategory] = self
        for segment in segments:
            if node is None:
                return None
            node = node.branches.get(segment)
        return node

    def activities(self) -> Iterator[Activity]:
        yield from self.leaves.values()
        for branch in self.branches.values():
            yield from branch.activities()


class ActivityCatalog:
    """User-defined activities plus the built-in ``Idle`` activity."""

    def __init__(self, activities: Iterable[Activity] = ()) -> None:
        self._activities: list[Activity] = [*activities, Activity.builtin_idle()]
        # Validates uniqueness and the branch/leaf invariant.
        ActivityCategory.from_activities(self._activities)

    @classmethod
    def load(
        cls, lines: Iterable[str], source: Optional[Path] = None
    ) -> "ActivityCatalog":
        activities = []
        tree = ActivityCategory.from_activities([Activity.builtin_idle()])
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                activity = parse_activity_line(line)
                tree._insert(activity)
            except (ParseError, CatalogError) as exc:
                if source is not None:
                    exc.locate(source, number)
                raise
            activities.append(activity)
        return cls(activities)

    @property
    def tree(self) -> ActivityCategory:
        return ActivityCategory.from_activities(self._activities)

    def __iter__(self) -> Iterator[Activity]:
        return iter(self._activities)

    def __len__(self) -> int:
        return len(self._activities)

    def add(
        self, path: str, billing_code: str, description: Optional[str] = None
    ) -> Activity:
        for value in (path, billing_code, description or ""):
            _check_field(value)
        if not billing_code:
            raise InvalidFieldError("billing code must not be empty")
        *namespace, name = split_path(path)
        activity = Activity(
            path=tuple(namespace),
            name=name,
            billing_code=billing_code,
            description=description or None,
        )
        ActivityCategory.from_activities([*self._activities, activity])
        self._activities.insert(len(self._activities) - 1, activity)
        logger.debug("Added activity %s (%s)", activity.full_path, billing_code)
        return activity

    def remove(self, path: str) -> Activity:
        activity = self.resolve(path)
        if activity.is_builtin:
            raise ReservedActivityError(activity.full_path)
        self._activities.remove(activity)
        logger.debug("Removed activity %s", activity.full_path)
        return activity

    def resolve(self, path: str) -> Activity:
        try:
            *namespace, name = split_path(path)
        except InvalidFieldError:
            raise NotFoundError(path) from None
        node = self.tree.find(namespace)
        if node is None or name not in node.leaves:
            raise NotFoundError(path)
        return node.leaves[name]

    def list_sorted(self, expand: bool, under: Optional[str] = None) -> list[CatalogRow]:
        """Return display rows for the whole catalog or one of its branches.

        Expanded listings contain every activity by full path. Collapsed
        listings show the branches of one level as ``name/`` headers followed
        by the activities defined directly on that level.
        """
        node = self.tree
        prefix = ""
        if under:
            segments = split_path(under.rstrip(PATH_SEPARATOR))
            found = node.find(segments)
            if found is None:
                raise NotFoundError(under)
            node = found
            prefix = PATH_SEPARATOR.join(segments) + PATH_SEPARATOR

        if expand:
            activities = sorted(node.activities(), key=lambda a: a.full_path)
            return [_row(a.full_path, a) for a in activities]

        rows = [
            CatalogRow(name=f"{prefix}{branch}{PATH_SEPARATOR}")
            for branch in sorted(node.branches)
        ]
        for name in sorted(node.leaves):
            rows.append(_row(prefix + name, node.leaves[name]))
        return rows

    def to_lines(self) -> list[str]:
        activities = sorted(
            (a for a in self._activities if not a.is_builtin),
            key=lambda a: a.full_path,
        )
        return [format_activity_line(a) for a in activities]


def load_catalog(path: Path) -> ActivityCatalog:
    """Read the catalog file; a missing file is an empty catalog."""
    path = Path(path)
    if not path.exists():
        logger.debug("No catalog at %s; starting empty.", path)
        return ActivityCatalog()
    return ActivityCatalog.load(read_lines(path), source=path)


def save_catalog(path: Path, catalog: ActivityCatalog) -> None:
    """Replace the catalog file with the serialized catalog."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = catalog.to_lines()
    tmp_path = path.with_name(path.name + ".tmp")
    with tmp_path.open("w", encoding="utf-8", newline="\n") as handle:
        handle.writelines(f"{line}\n" for line in lines)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)
    logger.debug("Wrote %d activities to %s", len(lines), path)


def _row(name: str, activity: Activity) -> CatalogRow:
    return CatalogRow(
        name=name,
        billing_code=activity.billing_code,
        description=activity.description or "",
    )


def _check_field(value: str) -> None:
    if FIELD_SEPARATOR in value or "\n" in value or "\r" in value:
        raise InvalidFieldError(f"{value!r} must not contain tabs or line breaks")
