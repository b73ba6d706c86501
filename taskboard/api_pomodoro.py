"""Pomodoro session endpoints."""

from __future__ import annotations

from fastapi import Form, Request
from fastapi.responses import PlainTextResponse, Response

from taskboard.api_router import JSON_MEDIA_TYPE, api_router, get_request_store
from taskboard.codec import encode


@api_router.post("/pomodoro/start", response_class=PlainTextResponse)
def start_pomodoro(
    request: Request, task_id: str = Form("", alias="taskId")
) -> str:
    """Start a session for the task and return the new session id."""
    return get_request_store(request).start_session(task_id)


@api_router.post("/pomodoro/stop", response_class=PlainTextResponse)
def stop_pomodoro(
    request: Request, session_id: str = Form("", alias="sessionId")
) -> str:
    get_request_store(request).stop_session(session_id)
    return "OK"


@api_router.get("/pomodoro/stats")
def pomodoro_stats(request: Request) -> Response:
    stats = get_request_store(request).session_stats()
    return Response(content=encode(stats.to_dict()), media_type=JSON_MEDIA_TYPE)
