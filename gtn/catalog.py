"""Catalog ownership, add-flow validation and human-input parsing."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Iterator

from gtn.models import (
    DELIMITER,
    FAMILY_GOAL,
    FAMILY_KINDS,
    FAMILY_NOTE,
    FAMILY_TASK,
    NON_QUANTIFIABLE_GOAL,
    PROTECTED_NOTE,
    RECURRING_TASK,
    Goal,
    Item,
    Note,
    Task,
    family_of,
    item_from_dict,
)

logger = logging.getLogger(__name__)


class Catalog:
    """Insertion-ordered collection that owns every item.

    Items are never removed, so an item's position is a stable handle.
    Engines should work on ``snapshot()`` lists rather than on the catalog.
    """

    def __init__(self, items: Iterable[Item] | None = None) -> None:
        self._items: list[Item] = list(items or [])
        self._lock = threading.Lock()

    def add(self, item: Item) -> int:
        """Append *item* and return its index."""
        with self._lock:
            self._items.append(item)
            return len(self._items) - 1

    def get(self, index: int) -> Item:
        with self._lock:
            if index < 0 or index >= len(self._items):
                raise IndexError(f"No item at index {index}")
            return self._items[index]

    def snapshot(self) -> list[Item]:
        with self._lock:
            return list(self._items)

    def entries(self) -> list[tuple[int, Item]]:
        """(index, item) pairs in insertion order."""
        with self._lock:
            return list(enumerate(self._items))

    def index_of(self, item: Item) -> int:
        with self._lock:
            for i, it in enumerate(self._items):
                if it is item:
                    return i
        raise ValueError("Item is not in this catalog")

    def filter_by_family(self, family: str) -> list[Item]:
        if family not in FAMILY_KINDS:
            raise ValueError(f"Unknown family: {family!r}")
        return [it for it in self.snapshot() if it.family == family]

    def filter_by_kind(self, kind: str) -> list[Item]:
        if family_of(kind) is None:
            raise ValueError(f"Unknown item kind: {kind!r}")
        return [it for it in self.snapshot() if it.kind == kind]

    def tasks(self) -> list[Task]:
        return self.filter_by_family(FAMILY_TASK)  # type: ignore[return-value]

    def notes(self) -> list[Note]:
        return self.filter_by_family(FAMILY_NOTE)  # type: ignore[return-value]

    def goals(self) -> list[Goal]:
        return self.filter_by_family(FAMILY_GOAL)  # type: ignore[return-value]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.snapshot())


# ── Human input parsing ───────────────────────────────────────


def parse_priority(text: str) -> int:
    """Parse a priority typed by a user. Raises ValueError if not an integer."""
    try:
        return int(str(text).strip())
    except ValueError:
        raise ValueError(f"Priority must be an integer, got {text!r}") from None


def parse_progress(text: str) -> float:
    """Parse a progress fraction in [0, 1]. Raises ValueError otherwise."""
    try:
        value = float(str(text).strip())
    except ValueError:
        raise ValueError(f"Progress must be a number, got {text!r}") from None
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Progress must be between 0.0 and 1.0, got {value}")
    return value


def parse_tags(text: str) -> list[str]:
    """Split comma-separated tags; empty entries become the default tag."""
    return [t.strip() for t in str(text).split(DELIMITER)]


# ── Validation ────────────────────────────────────────────────


def _storable(name: str, value: Any) -> list[str]:
    """Errors for a value the data file cannot hold as a single field."""
    text = str(value)
    if DELIMITER in text or "\n" in text or "\r" in text:
        return [f"{name} must not contain commas or line breaks: {text!r}"]
    return []


def validate_item(data: dict[str, Any]) -> list[str]:
    """Validate an add-flow mapping and return list of errors (empty if valid)."""
    errors = []
    kind = data.get("kind")
    family = family_of(str(kind)) if kind is not None else None
    if kind is None:
        errors.append("Missing required field: kind")
    elif family is None:
        errors.append(f"Invalid item kind: {kind}")

    if not str(data.get("title", "")).strip():
        errors.append("Missing required field: title")
    errors += _storable("Title", data.get("title", ""))
    errors += _storable("Description", data.get("description", ""))

    if family == FAMILY_TASK:
        try:
            parse_priority(data.get("priority", ""))
        except ValueError as e:
            errors.append(str(e))
        errors += _storable("Deadline", data.get("deadline", ""))
        if kind == RECURRING_TASK:
            errors += _storable("Interval", data.get("interval", ""))
    elif family == FAMILY_NOTE:
        tags = data.get("tags", "")
        for tag in parse_tags(tags) if isinstance(tags, str) else tags:
            errors += _storable("Tag", tag)
        if kind == PROTECTED_NOTE:
            password = str(data.get("password", ""))
            if not password:
                errors.append("Missing required field: password")
            elif password != password.strip():
                errors.append("Password must not start or end with whitespace")
            errors += _storable("Password", password)
    elif family == FAMILY_GOAL and kind != NON_QUANTIFIABLE_GOAL:
        try:
            parse_progress(data.get("progress", 0.0))
        except ValueError as e:
            errors.append(str(e))

    return errors


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    d = dict(data)
    kind = d["kind"]
    family = family_of(kind)
    d["title"] = str(d["title"]).strip()
    d["description"] = str(d.get("description", "")).strip()
    if family == FAMILY_TASK:
        d["priority"] = parse_priority(d["priority"])
        d["deadline"] = str(d.get("deadline", "")).strip()
        if kind == RECURRING_TASK:
            d["interval"] = str(d.get("interval", "")).strip()
        else:
            d.pop("interval", None)
    elif family == FAMILY_NOTE:
        tags = d.get("tags", "")
        d["tags"] = parse_tags(tags) if isinstance(tags, str) else list(tags)
        if kind != PROTECTED_NOTE:
            d.pop("password", None)
    elif family == FAMILY_GOAL:
        if kind == NON_QUANTIFIABLE_GOAL:
            d["progress"] = 0.0
        else:
            d["progress"] = parse_progress(d.get("progress", 0.0))
    return d


def create_item(catalog: Catalog, data: dict[str, Any]) -> tuple[Item | None, list[str]]:
    """Validate, build and add a new item. Returns (item, errors)."""
    errors = validate_item(data)
    if errors:
        logger.info("Rejected new item: %s", "; ".join(errors))
        return None, errors

    item = item_from_dict(_normalize(data))
    catalog.add(item)
    logger.info("Added %s %r", item.kind, item.title)
    return item, []

