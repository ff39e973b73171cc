"""Line-delimited catalog format: parsing, bulk load and save.

One record per line, comma-separated, variant tag first::

    Task,title,description,deadline,priority
    RecurringTask,title,description,deadline,priority,interval
    Note,title,description,tag1,tag2,...
    ProtectedNote,title,description,tag1,...,password
    Goal,title,description,progress

Malformed numeric fields keep their defaults and the record is still
produced; the problems come back alongside it so callers can report a
partial record.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gtn.catalog import Catalog
from gtn.fileio import read_text, write_lines_atomic
from gtn.models import (
    DELIMITER,
    FAMILY_GOAL,
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
)

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"


def ingest(line: str) -> tuple[Item | None, list[str]]:
    """Parse one record. Returns (item, errors).

    An unknown variant tag yields no item. Any other problem yields the item
    built from whatever parsed, plus the list of problems.
    """
    fields = [f.strip() for f in line.rstrip("\r\n").split(DELIMITER)]
    kind = fields[0]
    family = family_of(kind)
    if family is None:
        return None, [f"Unknown item type: {kind!r}"]

    errors: list[str] = []

    def take(index: int, name: str) -> str | None:
        if index < len(fields):
            return fields[index]
        errors.append(f"Missing field: {name}")
        return None

    title = take(1, "title") or ""
    description = take(2, "description") or ""
    if not title and len(fields) > 1:
        errors.append("Empty title")

    if family == FAMILY_TASK:
        deadline = take(3, "deadline") or ""
        priority = 0
        raw = take(4, "priority")
        if raw is not None:
            try:
                priority = int(raw)
            except ValueError:
                errors.append(f"Priority is not an integer: {raw!r}")
        interval = ""
        if kind == RECURRING_TASK:
            interval = DELIMITER.join(fields[5:]) if len(fields) > 5 else (take(5, "interval") or "")
        return Task(title=title, description=description, kind=kind,
                    deadline=deadline, priority=priority, interval=interval), errors

    if family == FAMILY_NOTE:
        rest = fields[3:]
        password = ""
        if kind == PROTECTED_NOTE:
            if len(rest) >= 2:
                password = rest.pop()
            else:
                errors.append("Missing field: password")
        if not rest:
            errors.append("Missing field: tags")
        return Note(title=title, description=description, kind=kind,
                    tags=rest, password=password), errors

    progress = 0.0
    raw = take(3, "progress")
    if raw is not None:
        try:
            progress = float(raw)
        except ValueError:
            errors.append(f"Progress is not a number: {raw!r}")
    if kind != NON_QUANTIFIABLE_GOAL and not 0.0 <= progress <= 1.0:
        errors.append(f"Progress out of range [0, 1]: {progress}")
        progress = min(1.0, max(0.0, progress))
    return Goal(title=title, description=description, kind=kind, progress=progress), errors


def _clean(value: str) -> str:
    return value.replace(DELIMITER, " ").replace("\n", " ").replace("\r", " ")


def dump_line(item: Item) -> str:
    """Serialise *item* in the ingestion format. Embedded commas become spaces."""
    fields = [item.kind, item.title, item.description]
    if item.family == FAMILY_TASK:
        fields += [item.deadline, str(item.priority)]  # type: ignore[attr-defined]
        if item.kind == RECURRING_TASK:
            fields.append(item.interval)  # type: ignore[attr-defined]
    elif item.family == FAMILY_NOTE:
        fields += list(item.tags)  # type: ignore[attr-defined]
        if item.kind == PROTECTED_NOTE:
            fields.append(item.password)  # type: ignore[attr-defined]
    elif item.family == FAMILY_GOAL:
        fields.append(repr(float(item.progress)))  # type: ignore[attr-defined]
    return DELIMITER.join(_clean(f) for f in fields)


def parse_lines(lines: list[str], catalog: Catalog | None = None) -> tuple[Catalog, list[str]]:
    """Ingest *lines* into *catalog* (new if None). Returns (catalog, issues)."""
    if catalog is None:
        catalog = Catalog()
    issues: list[str] = []
    for lineno, line in enumerate(lines, 1):
        if not line.strip() or line.lstrip().startswith(COMMENT_PREFIX):
            continue
        item, errors = ingest(line)
        if item is None:
            issue = f"line {lineno}: skipped: {'; '.join(errors)}"
        else:
            catalog.add(item)
            if not errors:
                continue
            issue = f"line {lineno}: partial record: {'; '.join(errors)}"
        issues.append(issue)
        logger.warning(issue)
    return catalog, issues


def load_catalog(path: Path) -> tuple[Catalog, list[str]]:
    """Load the data file at *path*. A missing file gives an empty catalog."""
    catalog, issues = parse_lines(read_text(path).splitlines())
    logger.info("Loaded %d items from %s (%d issues)", len(catalog), path, len(issues))
    return catalog, issues


def save_catalog(catalog: Catalog, path: Path) -> int:
    """Write every item to *path* atomically. Returns the number written."""
    lines = [dump_line(item) for item in catalog.snapshot()]
    write_lines_atomic(path, lines)
    logger.info("Saved %d items to %s", len(lines), path)
    return len(lines)
