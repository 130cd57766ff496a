from __future__ import annotations

import pytest

from timetrack.catalog import (
    ActivityCatalog,
    ActivityCategory,
    format_activity_line,
    load_catalog,
    parse_activity_line,
    save_catalog,
)
from timetrack.errors import (
    DuplicateNameError,
    EmptyName,
    InvalidFieldError,
    MalformedPath,
    MissingBillingCode,
    NotFoundError,
    PathConflictError,
    ReservedActivityError,
)
from timetrack.models import Activity, CatalogRow

CATALOG_LINES = [
    "proj/docs\tWBS-1\tWriting documentation",
    "proj/code\tWBS-2\t",
    "admin\tWBS-9\tMeetings",
    "zeta/x/y\tWBS-3",
]


@pytest.fixture
def catalog():
    return ActivityCatalog.load(CATALOG_LINES)


def test_parse_activity_line():
    activity = parse_activity_line("proj/docs\tWBS-1\tWriting documentation")

    assert activity == Activity(
        path=("proj",),
        name="docs",
        billing_code="WBS-1",
        description="Writing documentation",
    )
    assert activity.full_path == "proj/docs"


def test_empty_description_is_absent():
    assert parse_activity_line("admin\tWBS-9\t").description is None
    assert parse_activity_line("admin\tWBS-9").description is None


@pytest.mark.parametrize(
    ("line", "error"),
    [
        ("admin", MissingBillingCode),
        ("proj/\tWBS-1", EmptyName),
        ("\tWBS-1", EmptyName),
        ("", MalformedPath),
        ("proj//docs\tWBS-1", MalformedPath),
        ("/docs\tWBS-1", MalformedPath),
    ],
)
def test_malformed_activity_lines(line, error):
    with pytest.raises(error):
        parse_activity_line(line)


@pytest.mark.parametrize(
    "activity",
    [
        Activity(("proj",), "docs", "WBS-1", "Writing documentation"),
        Activity((), "admin", "WBS-9"),
        Activity(("a", "b", "c"), "d", "X.1.2", "deep"),
    ],
)
def test_activity_line_round_trip(activity):
    assert parse_activity_line(format_activity_line(activity)) == activity


def test_builtin_idle_is_always_present():
    catalog = ActivityCatalog()

    idle = catalog.resolve("Idle")
    assert idle.billing_code == "Idle"
    assert idle.description is None
    assert catalog.to_lines() == []


def test_load_reports_line_numbers(tmp_path):
    path = tmp_path / "activities"
    path.write_text("admin\tWBS-9\nbroken\n", encoding="utf-8")

    with pytest.raises(MissingBillingCode) as excinfo:
        load_catalog(path)

    assert excinfo.value.line_number == 2
    assert str(path) in str(excinfo.value)


def test_duplicate_lines_are_rejected():
    with pytest.raises(DuplicateNameError):
        ActivityCatalog.load(["admin\tA", "admin\tB"])


def test_idle_cannot_be_defined_in_the_file():
    with pytest.raises(DuplicateNameError):
        ActivityCatalog.load(["Idle\tX"])


@pytest.mark.parametrize(
    "lines",
    [
        ["proj\tA", "proj/docs\tB"],
        ["proj/docs\tB", "proj\tA"],
    ],
)
def test_branch_and_leaf_cannot_share_a_name(lines):
    with pytest.raises(PathConflictError):
        ActivityCatalog.load(lines)


def test_add_then_resolve(catalog):
    added = catalog.add("proj/tests", "WBS-4", "Testing")

    assert catalog.resolve("proj/tests") == added
    assert "proj/tests\tWBS-4\tTesting" in catalog.to_lines()


def test_add_twice_fails(catalog):
    catalog.add("new", "WBS-5")

    with pytest.raises(DuplicateNameError):
        catalog.add("new", "WBS-6")


def test_add_rejects_conflicts_and_bad_fields(catalog):
    with pytest.raises(PathConflictError):
        catalog.add("admin/weekly", "WBS-7")
    with pytest.raises(PathConflictError):
        catalog.add("proj", "WBS-7")
    with pytest.raises(DuplicateNameError):
        catalog.add("Idle", "WBS-7")
    with pytest.raises(InvalidFieldError):
        catalog.add("proj//x", "WBS-7")
    with pytest.raises(InvalidFieldError):
        catalog.add("tabbed", "WBS\t7")
    with pytest.raises(InvalidFieldError):
        catalog.add("nowbs", "")
    assert len(catalog) == len(CATALOG_LINES) + 1


def test_remove_then_resolve_fails(catalog):
    removed = catalog.remove("proj/docs")

    assert removed.billing_code == "WBS-1"
    with pytest.raises(NotFoundError):
        catalog.resolve("proj/docs")
    with pytest.raises(NotFoundError):
        catalog.remove("proj/docs")


def test_idle_cannot_be_removed(catalog):
    with pytest.raises(ReservedActivityError):
        catalog.remove("Idle")


def test_resolve_is_exact(catalog):
    with pytest.raises(NotFoundError):
        catalog.resolve("docs")
    with pytest.raises(NotFoundError):
        catalog.resolve("proj")
    with pytest.raises(NotFoundError):
        catalog.resolve("")


def test_expanded_listing_is_sorted_by_full_path(catalog):
    rows = catalog.list_sorted(expand=True)

    assert [row.name for row in rows] == [
        "Idle",
        "admin",
        "proj/code",
        "proj/docs",
        "zeta/x/y",
    ]
    assert rows[3] == CatalogRow("proj/docs", "WBS-1", "Writing documentation")


def test_collapsed_listing_shows_branches_first(catalog):
    rows = catalog.list_sorted(expand=False)

    assert rows == [
        CatalogRow("proj/"),
        CatalogRow("zeta/"),
        CatalogRow("Idle", "Idle", ""),
        CatalogRow("admin", "WBS-9", "Meetings"),
    ]


def test_listing_below_a_branch(catalog):
    assert [row.name for row in catalog.list_sorted(False, under="proj")] == [
        "proj/code",
        "proj/docs",
    ]
    assert catalog.list_sorted(False, under="zeta/") == [CatalogRow("zeta/x/")]
    assert [row.name for row in catalog.list_sorted(True, under="zeta")] == ["zeta/x/y"]
    with pytest.raises(NotFoundError):
        catalog.list_sorted(False, under="nope")


def test_tree_structure(catalog):
    tree = catalog.tree

    assert isinstance(tree, ActivityCategory)
    assert set(tree.branches) == {"proj", "zeta"}
    assert set(tree.leaves) == {"admin", "Idle"}
    assert set(tree.branches["proj"].leaves) == {"docs", "code"}
    assert tree.find(["zeta", "x"]).leaves["y"].billing_code == "WBS-3"
    assert tree.find(["missing"]) is None


def test_save_and_load(tmp_path, catalog):
    path = tmp_path / "data" / "activities"
    catalog.add("new", "WBS-5", "Fresh")

    save_catalog(path, catalog)
    reloaded = load_catalog(path)

    assert reloaded.to_lines() == catalog.to_lines()
    assert "Idle" not in path.read_text(encoding="utf-8")
    assert not path.with_name("activities.tmp").exists()


def test_missing_file_is_empty_catalog(tmp_path):
    catalog = load_catalog(tmp_path / "activities")

    assert [activity.full_path for activity in catalog] == ["Idle"]


@pytest.mark.parametrize("separator", ["\x0c", "\u2028", "\x85", "\x1d"])
def test_unicode_line_breaks_survive_save_and_load(tmp_path, separator):
    path = tmp_path / "activities"
    catalog = ActivityCatalog()
    catalog.add("docs", "CC1", f"page{separator}break")
    catalog.add("admin", "CC2")

    save_catalog(path, catalog)
    reloaded = load_catalog(path)

    assert reloaded.resolve("docs").description == f"page{separator}break"
    assert reloaded.to_lines() == catalog.to_lines()


def test_duplicate_in_file_reports_location(tmp_path):
    path = tmp_path / "activities"
    path.write_text("admin\tA\n\nadmin\tB\n", encoding="utf-8")

    with pytest.raises(DuplicateNameError) as excinfo:
        load_catalog(path)

    assert excinfo.value.source == path
    assert excinfo.value.line_number == 3
    assert str(excinfo.value).startswith(f"{path}:3: ")


def test_conflict_in_file_reports_location(tmp_path):
    path = tmp_path / "activities"
    path.write_text("proj/docs\tB\nadmin\tC\nproj\tA\n", encoding="utf-8")

    with pytest.raises(PathConflictError) as excinfo:
        load_catalog(path)

    assert excinfo.value.line_number == 3
    assert str(path) in str(excinfo.value)


def test_idle_in_file_reports_location(tmp_path):
    path = tmp_path / "activities"
    path.write_text("Idle\tX\n", encoding="utf-8")

    with pytest.raises(DuplicateNameError) as excinfo:
        load_catalog(path)

    assert excinfo.value.line_number == 1


def test_catalog_errors_without_a_file_have_no_location():
    with pytest.raises(DuplicateNameError) as excinfo:
        ActivityCatalog.load(["admin\tA", "admin\tB"])

    assert excinfo.value.line_number is None
    assert str(excinfo.value) == "activity 'admin' already exists"
