"""HTTP handler registration."""

from __future__ import annotations

from fastapi import FastAPI

from taskboard.api_router import api_router, static_router

# Import modules to register routes with the shared routers.
from taskboard import api_pomodoro, api_static, api_tasks  # noqa: F401


def register_api_handlers(app: FastAPI) -> None:
    """Attach API routes, then the static catch-all, to the application."""
    app.include_router(api_router)
    app.include_router(static_router)
