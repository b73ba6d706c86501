"""Task and pomodoro session records plus derived scheduling metadata."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Any

# Reported as daysLeft for a due date that does not parse.
UNPARSABLE_DAYS_LEFT = 2**63 - 1

DUE_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class Priority(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]


_PRIORITY_RANKS = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_due(raw: str) -> date | None:
    """Parse a ``YYYY-MM-DD`` due date, returning None when it is malformed."""
    if not isinstance(raw, str) or not DUE_DATE_PATTERN.match(raw):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def compute_meta(due: str, today: date) -> tuple[Priority, int]:
    """Return ``(priority, days_left)`` for ``due`` evaluated on ``today``.

    Unparsable dates map to the lowest priority and the largest day count so
    they sort last.
    """
    due_date = parse_due(due)
    if due_date is None:
        return Priority.LOW, UNPARSABLE_DAYS_LEFT
    days_left = (due_date - today).days
    if days_left <= 3:
        return Priority.HIGH, days_left
    if days_left <= 7:
        return Priority.MEDIUM, days_left
    return Priority.LOW, days_left


@dataclass(slots=True)
class Task:
    id: str
    title: str
    due: str
    completed: bool = False
    tags: str = ""

    def snapshot(self, today: date) -> TaskSnapshot:
        priority, days_left = compute_meta(self.due, today)
        return TaskSnapshot(
            id=self.id,
            title=self.title,
            due=self.due,
            completed=self.completed,
            tags=self.tags,
            priority=priority,
            days_left=days_left,
        )


@dataclass(frozen=True)
class TaskSnapshot:
    """Read-only view of a task with its derived fields filled in."""

    id: str
    title: str
    due: str
    completed: bool
    tags: str
    priority: Priority
    days_left: int

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.priority.rank, self.days_left)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "due": self.due,
            "completed": self.completed,
            "priority": self.priority.value,
            "daysLeft": self.days_left,
            "tags": self.tags,
        }


@dataclass(slots=True)
class PomodoroSession:
    id: str
    task_id: str
    start: str
    end: str = ""
    completed: bool = False


@dataclass(frozen=True)
class SessionStats:
    total_sessions: int
    per_task: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"totalSessions": self.total_sessions, "perTask": dict(self.per_task)}
