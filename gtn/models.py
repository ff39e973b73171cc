"""Typed dataclasses for the GTN data model.

Items come in three families (tasks, notes, goals). Within a family the
concrete variant is carried by the ``kind`` tag, which doubles as the first
field of the ingestion line format. Classification is always a tag
comparison.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


# ── Variant tags ──────────────────────────────────────────────


TASK = "Task"
RECURRING_TASK = "RecurringTask"
ONE_TIME_TASK = "OneTimeTask"

NOTE = "Note"
PROTECTED_NOTE = "ProtectedNote"
PUBLIC_NOTE = "PublicNote"

GOAL = "Goal"
QUANTIFIABLE_GOAL = "QuantifiableGoal"
NON_QUANTIFIABLE_GOAL = "NonQuantifiableGoal"

FAMILY_TASK = "task"
FAMILY_NOTE = "note"
FAMILY_GOAL = "goal"

TASK_KINDS = (TASK, RECURRING_TASK, ONE_TIME_TASK)
NOTE_KINDS = (NOTE, PROTECTED_NOTE, PUBLIC_NOTE)
GOAL_KINDS = (GOAL, QUANTIFIABLE_GOAL, NON_QUANTIFIABLE_GOAL)

FAMILY_KINDS = {
    FAMILY_TASK: TASK_KINDS,
    FAMILY_NOTE: NOTE_KINDS,
    FAMILY_GOAL: GOAL_KINDS,
}

KIND_LABELS = {
    TASK: "Generic Task",
    RECURRING_TASK: "Recurring Task",
    ONE_TIME_TASK: "One-Time Task",
    NOTE: "Generic Note",
    PROTECTED_NOTE: "Protected Note",
    PUBLIC_NOTE: "Public Note",
    GOAL: "Generic Goal",
    QUANTIFIABLE_GOAL: "Quantifiable Goal",
    NON_QUANTIFIABLE_GOAL: "Non-Quantifiable Goal",
}

# Reported by non-quantifiable goals in place of a progress value.
NOT_QUANTIFIED = -1.0

DEFAULT_TAG = "generic"

# Field separator of the line-delimited data file.
DELIMITER = ","


def family_of(kind: str) -> str | None:
    """Return the family a variant tag belongs to, or None if unknown."""
    for family, kinds in FAMILY_KINDS.items():
        if kind in kinds:
            return family
    return None


# ── Items ─────────────────────────────────────────────────────


@dataclass
class Item:
    title: str = ""
    description: str = ""
    kind: str = ""

    family: ClassVar[str] = ""

    def render_summary(self) -> str:
        raise NotImplementedError

    def render_detail(self) -> str:
        return f"Title: {self.title}\nDescription: {self.description}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "family": self.family,
            "title": self.title,
            "description": self.description,
        }


@dataclass
class Task(Item):
    kind: str = TASK
    deadline: str = ""  # compared as text, ISO date expected
    priority: int = 0
    interval: str = ""  # RecurringTask only

    family: ClassVar[str] = FAMILY_TASK

    @property
    def is_recurring(self) -> bool:
        return self.kind == RECURRING_TASK

    @property
    def is_one_time(self) -> bool:
        return self.kind == ONE_TIME_TASK

    def render_summary(self) -> str:
        label = {RECURRING_TASK: "Recurring Task", ONE_TIME_TASK: "One-Time Task"}.get(self.kind, "Task")
        line = f"{label}: {self.title}, Deadline: {self.deadline}, Priority: {self.priority}"
        if self.is_recurring:
            line += f", Interval: {self.interval}"
        return line

    def render_detail(self) -> str:
        details = f"{super().render_detail()}\nDeadline: {self.deadline}\nPriority: {self.priority}"
        if self.is_recurring:
            details += f"\nRecurrence Interval: {self.interval}"
        return details

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        kind = str(d.get("kind", TASK))
        return cls(
            title=str(d.get("title", "")),
            description=str(d.get("description", "")),
            kind=kind,
            deadline=str(d.get("deadline", "")),
            priority=int(d.get("priority", 0)),
            interval=str(d.get("interval", "")) if kind == RECURRING_TASK else "",
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["deadline"] = self.deadline
        d["priority"] = self.priority
        if self.is_recurring:
            d["interval"] = self.interval
        return d


@dataclass
class Note(Item):
    kind: str = NOTE
    tags: list[str] = field(default_factory=list)
    password: str = ""  # ProtectedNote only

    family: ClassVar[str] = FAMILY_NOTE

    def __post_init__(self) -> None:
        self.tags = normalize_tags(self.tags)

    @property
    def is_protected(self) -> bool:
        return self.kind == PROTECTED_NOTE

    @property
    def is_public(self) -> bool:
        return self.kind == PUBLIC_NOTE

    def render_summary(self) -> str:
        if self.is_protected:
            return f"Protected Note: {self.title} [Protected]"
        label = "Public Note" if self.is_public else "Note"
        return f"{label}: {self.title} [Tags: {' '.join(self.tags)}]"

    def render_detail(self) -> str:
        details = f"{super().render_detail()}\nTags: {', '.join(self.tags)}"
        if self.is_protected:
            details += "\nPassword Protected"
        return details

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Note:
        kind = str(d.get("kind", NOTE))
        tags = d.get("tags") or []
        if isinstance(tags, str):
            tags = tags.split(",")
        return cls(
            title=str(d.get("title", "")),
            description=str(d.get("description", "")),
            kind=kind,
            tags=[str(t) for t in tags],
            password=str(d.get("password", "")) if kind == PROTECTED_NOTE else "",
        )

    def to_dict(self, reveal: bool = False) -> dict[str, Any]:
        """JSON view of the note. The password is never included; a protected
        note's description is only included when *reveal* is set."""
        d = super().to_dict()
        d["tags"] = list(self.tags)
        if self.is_protected:
            d["protected"] = True
            if not reveal:
                d["description"] = ""
        return d


@dataclass
class Goal(Item):
    kind: str = GOAL
    progress: float = 0.0

    family: ClassVar[str] = FAMILY_GOAL

    @property
    def is_quantifiable(self) -> bool:
        return self.kind != NON_QUANTIFIABLE_GOAL

    def progress_value(self) -> float | None:
        """Stored progress, or None when progress does not apply."""
        if not self.is_quantifiable:
            return None
        return self.progress

    def get_progress(self) -> float:
        """Progress with the -1 sentinel for non-quantifiable goals."""
        value = self.progress_value()
        return NOT_QUANTIFIED if value is None else value

    def render_summary(self) -> str:
        if not self.is_quantifiable:
            return f"Non-Quantifiable Goal: {self.title} - Progress not quantified."
        label = "Quantifiable Goal" if self.kind == QUANTIFIABLE_GOAL else "Goal"
        return f"{label}: {self.title}, Progress: {self.progress * 100:.0f}%"

    def render_detail(self) -> str:
        details = f"{super().render_detail()}\nProgress: {int(self.progress * 100)}%"
        if not self.is_quantifiable:
            details += "\nNon-quantifiable progress"
        return details

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Goal:
        return cls(
            title=str(d.get("title", "")),
            description=str(d.get("description", "")),
            kind=str(d.get("kind", GOAL)),
            progress=float(d.get("progress") or 0.0),
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["progress"] = self.progress_value()
        return d


FAMILY_CLASSES: dict[str, type[Item]] = {
    FAMILY_TASK: Task,
    FAMILY_NOTE: Note,
    FAMILY_GOAL: Goal,
}


def normalize_tags(tags: list[str]) -> list[str]:
    """Strip tags and substitute empty ones with the default tag."""
    out = [t.strip() or DEFAULT_TAG for t in tags]
    return out or [DEFAULT_TAG]


def item_from_dict(d: dict[str, Any]) -> Item:
    """Build the right item family from a mapping carrying a ``kind`` tag."""
    kind = str(d.get("kind", ""))
    family = family_of(kind)
    if family is None:
        raise ValueError(f"Unknown item kind: {kind!r}")
    return FAMILY_CLASSES[family].from_dict(d)  # type: ignore[attr-defined]


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    data_file: str = "data.txt"
    password_attempts: int = 3
    log_level: str = "WARNING"
    log_file: str = "gtn.log"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            data_file=str(d.get("data_file", "data.txt")),
            password_attempts=max(1, int(d.get("password_attempts", 3))),
            log_level=str(d.get("log_level", "WARNING")).upper(),
            log_file=str(d.get("log_file", "gtn.log")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "data_file": self.data_file,
            "password_attempts": self.password_attempts,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }
