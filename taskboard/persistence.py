"""Flat-file persistence for the task and session collections."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable, Iterable, Mapping
from datetime import date
from pathlib import Path
from typing import Any

from taskboard.codec import decode_records, encode
from taskboard.errors import CodecError
from taskboard.models import PomodoroSession, Task, new_id

logger = logging.getLogger(__name__)

TASKS_FILENAME = "tasks.json"
SESSIONS_FILENAME = "sessions.json"
DEFAULT_TITLE = "Untitled"


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "due": task.due,
        "completed": task.completed,
        "tags": task.tags,
    }


def session_to_record(session: PomodoroSession) -> dict[str, Any]:
    return {
        "id": session.id,
        "taskId": session.task_id,
        "start": session.start,
        "end": session.end,
        "completed": session.completed,
    }


def task_from_record(
    record: Mapping[str, str],
    *,
    today: date,
    id_factory: Callable[[], str] = new_id,
) -> Task:
    """Build a Task from a decoded record, filling defaults for missing fields."""
    return Task(
        id=_record_id(record, id_factory),
        title=record.get("title", DEFAULT_TITLE),
        due=record.get("due", today.isoformat()),
        completed=_parse_bool(record.get("completed")),
        tags=record.get("tags", ""),
    )


def session_from_record(
    record: Mapping[str, str],
    *,
    id_factory: Callable[[], str] = new_id,
) -> PomodoroSession:
    """Build a PomodoroSession from a decoded record."""
    return PomodoroSession(
        id=_record_id(record, id_factory),
        task_id=record.get("taskId", ""),
        start=record.get("start", ""),
        end=record.get("end", ""),
        completed=_parse_bool(record.get("completed")),
    )


def _record_id(record: Mapping[str, str], id_factory: Callable[[], str]) -> str:
    raw_id = record.get("id", "")
    if not raw_id.strip():
        return id_factory()
    return raw_id


def _parse_bool(raw: str | None) -> bool:
    return raw is not None and raw.lower() == "true"


def _atomic_write(target_path: Path, content: str) -> None:
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=target_path.parent, delete=False
        ) as temp_file:
            temp_path = Path(temp_file.name)
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.replace(temp_path, target_path)
    finally:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass


class JsonFilePersistence:
    """
    Save and load the two collections as JSON arrays of flat objects.

    Every failure is logged and swallowed. A failed save leaves the in-memory
    store as the source of truth, and a failed load starts with an empty
    collection.
    """

    def __init__(
        self,
        tasks_path: str | Path,
        sessions_path: str | Path,
        *,
        atomic: bool = True,
        strict: bool = False,
        today: Callable[[], date] = date.today,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.tasks_path = Path(tasks_path)
        self.sessions_path = Path(sessions_path)
        self.atomic = atomic
        self.strict = strict
        self._today = today
        self._id_factory = id_factory

    @classmethod
    def in_directory(cls, data_dir: str | Path, **kwargs: Any) -> JsonFilePersistence:
        data_dir = Path(data_dir)
        return cls(data_dir / TASKS_FILENAME, data_dir / SESSIONS_FILENAME, **kwargs)

    # ---- save ----

    def save_tasks(self, tasks: Iterable[Task]) -> None:
        try:
            self._write(self.tasks_path, encode([task_to_record(t) for t in tasks]))
        except Exception:
            logger.exception("Failed to save tasks to %s", self.tasks_path)

    def save_sessions(self, sessions: Iterable[PomodoroSession]) -> None:
        try:
            self._write(
                self.sessions_path, encode([session_to_record(s) for s in sessions])
            )
        except Exception:
            logger.exception("Failed to save sessions to %s", self.sessions_path)

    def _write(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if self.atomic:
            _atomic_write(path, content)
        else:
            path.write_text(content, encoding="utf-8")

    # ---- load ----

    def load_tasks(self) -> list[Task]:
        try:
            records = self._read_records(self.tasks_path)
            today = self._today()
            tasks = [
                task_from_record(record, today=today, id_factory=self._id_factory)
                for record in records
            ]
        except CodecError as exc:
            logger.error(
                "Undecodable tasks file %s: %s", self.tasks_path, exc.error.to_dict()
            )
            return []
        except Exception:
            logger.exception("Failed to load tasks from %s", self.tasks_path)
            return []
        logger.info("Loaded %d tasks from %s", len(tasks), self.tasks_path)
        return tasks

    def load_sessions(self) -> list[PomodoroSession]:
        try:
            records = self._read_records(self.sessions_path)
            sessions = [
                session_from_record(record, id_factory=self._id_factory)
                for record in records
            ]
        except CodecError as exc:
            logger.error(
                "Undecodable sessions file %s: %s",
                self.sessions_path,
                exc.error.to_dict(),
            )
            return []
        except Exception:
            logger.exception("Failed to load sessions from %s", self.sessions_path)
            return []
        logger.info("Loaded %d sessions from %s", len(sessions), self.sessions_path)
        return sessions

    def _read_records(self, path: Path) -> list[dict[str, str]]:
        if not path.exists():
            return []
        return decode_records(path.read_text(encoding="utf-8"), strict=self.strict)
