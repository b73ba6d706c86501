"""In-memory task and pomodoro session store."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime

from taskboard.models import (
    PomodoroSession,
    SessionStats,
    Task,
    TaskSnapshot,
    new_id,
    utc_now,
)
from taskboard.persistence import JsonFilePersistence

logger = logging.getLogger(__name__)


class Store:
    """
    Authoritative in-memory store for tasks and pomodoro sessions.

    Locking:
    - one lock per collection, held for the whole operation including the save
    - task and session operations never block each other

    Lookups by unknown id are silent no-ops. Derived task fields are computed
    on every read from ``today()`` and never kept on the records.
    """

    def __init__(
        self,
        persistence: JsonFilePersistence | None = None,
        *,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._persistence = persistence
        self._today = today
        self._now = now
        self._id_factory = id_factory
        self._tasks: list[Task] = []
        self._sessions: list[PomodoroSession] = []
        self._task_lock = threading.Lock()
        self._session_lock = threading.Lock()

    @classmethod
    def open(cls, persistence: JsonFilePersistence, **kwargs) -> Store:
        """Create a store and populate it from ``persistence``."""
        store = cls(persistence, **kwargs)
        store.load()
        return store

    def load(self) -> None:
        if self._persistence is None:
            return
        tasks = self._persistence.load_tasks()
        with self._task_lock:
            self._tasks = tasks
        sessions = self._persistence.load_sessions()
        with self._session_lock:
            self._sessions = sessions
        logger.info("Store ready tasks=%d sessions=%d", len(tasks), len(sessions))

    # ---- tasks ----

    def add_task(self, title: str, due: str | None = None, tags: str = "") -> str:
        """Append a new open task and return its id; ``due`` defaults to today."""
        if due is None:
            due = self._today().isoformat()
        task = Task(id=self._id_factory(), title=title, due=due, tags=tags or "")
        with self._task_lock:
            self._tasks.append(task)
            self._save_tasks()
        logger.debug("Task added id=%s due=%s", task.id, due)
        return task.id

    def edit_task(self, task_id: str, title: str, due: str, tags: str) -> None:
        """Overwrite non-empty title/due and always overwrite tags."""
        with self._task_lock:
            task = self._find_task(task_id)
            if task is not None:
                if title:
                    task.title = title
                if due:
                    task.due = due
                task.tags = tags
            self._save_tasks()

    def delete_task(self, task_id: str) -> None:
        with self._task_lock:
            before = len(self._tasks)
            self._tasks = [t for t in self._tasks if t.id != task_id]
            removed = before - len(self._tasks)
            self._save_tasks()
        if removed:
            logger.debug("Task deleted id=%s", task_id)

    def toggle_complete(self, task_id: str) -> None:
        with self._task_lock:
            task = self._find_task(task_id)
            if task is not None:
                task.completed = not task.completed
            self._save_tasks()

    def list_tasks(self) -> list[TaskSnapshot]:
        """Snapshots sorted by priority rank, then by days left."""
        with self._task_lock:
            today = self._today()
            snapshots = [task.snapshot(today) for task in self._tasks]
        return sorted(snapshots, key=lambda snap: snap.sort_key)

    def get_task(self, task_id: str) -> TaskSnapshot | None:
        with self._task_lock:
            task = self._find_task(task_id)
            return task.snapshot(self._today()) if task else None

    def export_rows(self) -> list[TaskSnapshot]:
        """Snapshots in insertion order."""
        with self._task_lock:
            today = self._today()
            return [task.snapshot(today) for task in self._tasks]

    def _find_task(self, task_id: str) -> Task | None:
        return next((t for t in self._tasks if t.id == task_id), None)

    def _save_tasks(self) -> None:
        if self._persistence is not None:
            self._persistence.save_tasks(self._tasks)

    # ---- pomodoro sessions ----

    def start_session(self, task_id: str) -> str:
        session = PomodoroSession(
            id=self._id_factory(),
            task_id=task_id,
            start=self._now().isoformat(),
        )
        with self._session_lock:
            self._sessions.append(session)
            self._save_sessions()
        logger.debug("Session started id=%s task=%s", session.id, task_id)
        return session.id

    def stop_session(self, session_id: str) -> None:
        """Stop a session. Stopping it again overwrites the end time."""
        with self._session_lock:
            session = next((s for s in self._sessions if s.id == session_id), None)
            if session is not None:
                session.end = self._now().isoformat()
                session.completed = True
            self._save_sessions()

    def session_stats(self) -> SessionStats:
        with self._session_lock:
            per_task = Counter(s.task_id for s in self._sessions)
            return SessionStats(
                total_sessions=len(self._sessions), per_task=dict(per_task)
            )

    def list_sessions(self) -> list[PomodoroSession]:
        with self._session_lock:
            return [replace(s) for s in self._sessions]

    def _save_sessions(self) -> None:
        if self._persistence is not None:
            self._persistence.save_sessions(self._sessions)
