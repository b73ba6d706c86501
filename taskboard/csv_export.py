"""CSV rendering for task snapshots."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable

from taskboard.models import TaskSnapshot

CSV_HEADER = ["id", "title", "due", "completed", "priority", "daysLeft", "tags"]
CSV_FILENAME = "tasks.csv"


def render_tasks_csv(rows: Iterable[TaskSnapshot]) -> str:
    """Render tasks as CSV; fields with a comma, quote or newline are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow(
            [
                row.id,
                row.title,
                row.due,
                "true" if row.completed else "false",
                row.priority.value,
                row.days_left,
                row.tags,
            ]
        )
    return buffer.getvalue()
