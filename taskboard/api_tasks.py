"""Task endpoints."""

from __future__ import annotations

from fastapi import Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, Response

from taskboard.api_router import JSON_MEDIA_TYPE, api_router, get_request_store
from taskboard.codec import encode
from taskboard.csv_export import CSV_FILENAME, render_tasks_csv
from taskboard.persistence import DEFAULT_TITLE


@api_router.post("/addTask", response_class=PlainTextResponse)
async def add_task(request: Request) -> str:
    """
    Create a task. Defaults apply only to fields absent from the body; a
    present but empty `due` is stored as-is and reads back as unparsable.
    """
    form = await request.form()
    store = get_request_store(request)
    await run_in_threadpool(
        store.add_task,
        form.get("title", DEFAULT_TITLE),
        form.get("due"),
        form.get("tags", ""),
    )
    return "OK"


@api_router.post("/editTask", response_class=PlainTextResponse)
def edit_task(
    request: Request,
    task_id: str = Form("", alias="id"),
    title: str = Form(""),
    due: str = Form(""),
    tags: str = Form(""),
) -> str:
    """Edit a task in place. Empty title or due keeps the current value."""
    get_request_store(request).edit_task(task_id, title, due, tags)
    return "OK"


@api_router.post("/deleteTask", response_class=PlainTextResponse)
def delete_task(request: Request, task_id: str = Form("", alias="id")) -> str:
    get_request_store(request).delete_task(task_id)
    return "OK"


@api_router.post("/toggleComplete", response_class=PlainTextResponse)
def toggle_complete(request: Request, task_id: str = Form("", alias="id")) -> str:
    get_request_store(request).toggle_complete(task_id)
    return "OK"


@api_router.get("/tasks")
def list_tasks(request: Request) -> Response:
    """Return tasks sorted by urgency, with derived fields."""
    snapshots = get_request_store(request).list_tasks()
    body = encode([snapshot.to_dict() for snapshot in snapshots])
    return Response(content=body, media_type=JSON_MEDIA_TYPE)


@api_router.get("/exportCSV")
def export_csv(request: Request) -> Response:
    """Download every task as CSV in insertion order."""
    body = render_tasks_csv(get_request_store(request).export_rows())
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )
