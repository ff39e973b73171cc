"""Tests for gtn/catalog.py: ownership, filtering, add-flow validation."""

import pytest

from gtn.catalog import (
    Catalog,
    create_item,
    parse_priority,
    parse_progress,
    parse_tags,
    validate_item,
)
from gtn.models import (
    FAMILY_NOTE,
    GOAL,
    NON_QUANTIFIABLE_GOAL,
    NOTE,
    PROTECTED_NOTE,
    RECURRING_TASK,
    TASK,
    Goal,
    Note,
    Task,
)


def _catalog() -> Catalog:
    return Catalog([
        Task(title="a", priority=2),
        Note(title="b", tags=["x"]),
        Goal(title="c", progress=0.2),
        Task(title="d", kind=RECURRING_TASK, interval="daily"),
    ])


def test_add_returns_index():
    c = Catalog()
    assert c.add(Task(title="first")) == 0
    assert c.add(Note(title="second")) == 1
    assert len(c) == 2
    assert c.get(1).title == "second"


def test_get_out_of_range():
    with pytest.raises(IndexError):
        Catalog().get(0)
    with pytest.raises(IndexError):
        _catalog().get(-1)


def test_snapshot_is_independent():
    c = _catalog()
    snap = c.snapshot()
    c.add(Task(title="e"))
    assert len(snap) == 4
    assert len(c) == 5


def test_filters():
    c = _catalog()
    assert [t.title for t in c.tasks()] == ["a", "d"]
    assert [n.title for n in c.notes()] == ["b"]
    assert [g.title for g in c.goals()] == ["c"]
    assert [t.title for t in c.filter_by_kind(RECURRING_TASK)] == ["d"]
    assert c.filter_by_family(FAMILY_NOTE) == c.notes()


def test_filters_reject_unknown():
    c = _catalog()
    with pytest.raises(ValueError):
        c.filter_by_family("reminder")
    with pytest.raises(ValueError):
        c.filter_by_kind("Reminder")


def test_index_of_uses_identity():
    c = _catalog()
    item = c.get(2)
    assert c.index_of(item) == 2
    with pytest.raises(ValueError):
        c.index_of(Goal(title="c", progress=0.2))


def test_parse_priority():
    assert parse_priority(" 7 ") == 7
    with pytest.raises(ValueError, match="integer"):
        parse_priority("high")


def test_parse_progress():
    assert parse_progress("0.25") == 0.25
    with pytest.raises(ValueError):
        parse_progress("half")
    with pytest.raises(ValueError):
        parse_progress("1.5")


def test_parse_tags():
    assert parse_tags("work, urgent") == ["work", "urgent"]


def test_validate_item_valid():
    assert validate_item({"kind": TASK, "title": "T", "priority": "3"}) == []


def test_validate_item_missing_kind_and_title():
    errors = validate_item({})
    assert "Missing required field: kind" in errors
    assert "Missing required field: title" in errors


def test_validate_item_invalid_kind():
    errors = validate_item({"kind": "Reminder", "title": "x"})
    assert any("Invalid item kind" in e for e in errors)


def test_validate_item_bad_numbers():
    assert validate_item({"kind": TASK, "title": "T", "priority": "soon"})
    assert validate_item({"kind": GOAL, "title": "G", "progress": "2"})
    assert validate_item({"kind": NON_QUANTIFIABLE_GOAL, "title": "G", "progress": "n/a"}) == []


def test_create_item_adds_to_catalog():
    c = Catalog()
    item, errors = create_item(c, {"kind": NOTE, "title": " Ideas ", "tags": "a, ,b"})
    assert errors == []
    assert item.title == "Ideas"
    assert item.tags == ["a", "generic", "b"]
    assert c.get(0) is item


def test_create_item_protected_note_keeps_password():
    c = Catalog()
    item, _ = create_item(c, {"kind": PROTECTED_NOTE, "title": "Bank", "tags": "f", "password": "pw"})
    assert item.password == "pw"


def test_create_item_rejects_invalid():
    c = Catalog()
    item, errors = create_item(c, {"kind": TASK, "title": "", "priority": "1"})
    assert item is None
    assert errors
    assert len(c) == 0


def test_create_item_non_quantifiable_goal_ignores_progress():
    c = Catalog()
    item, errors = create_item(c, {"kind": NON_QUANTIFIABLE_GOAL, "title": "Calm", "progress": "lots"})
    assert errors == []
    assert item.get_progress() == -1.0


def test_validate_item_rejects_unstorable_text():
    errors = validate_item({"kind": PROTECTED_NOTE, "title": "Bank", "tags": "f", "password": "a,b"})
    assert any(e.startswith("Password must not contain commas") for e in errors)
    errors = validate_item({"kind": NOTE, "title": "N", "tags": ["a,b"]})
    assert any(e.startswith("Tag must not contain commas") for e in errors)
    errors = validate_item({"kind": TASK, "title": "x, y", "description": "two\nlines", "priority": "1"})
    assert len(errors) == 2
    errors = validate_item({"kind": RECURRING_TASK, "title": "T", "priority": "1", "interval": "mon,thu"})
    assert any(e.startswith("Interval") for e in errors)


def test_validate_item_protected_note_password():
    assert "Missing required field: password" in validate_item(
        {"kind": PROTECTED_NOTE, "title": "Bank", "tags": "f"}
    )
    assert "Password must not start or end with whitespace" in validate_item(
        {"kind": PROTECTED_NOTE, "title": "Bank", "tags": "f", "password": " pw"}
    )


def test_create_item_rejects_comma_in_password():
    c = Catalog()
    item, errors = create_item(c, {"kind": PROTECTED_NOTE, "title": "Bank", "tags": "f", "password": "a,b"})
    assert item is None
    assert errors
    assert len(c) == 0
