"""Static frontend serving."""

from __future__ import annotations

from pathlib import Path

from fastapi import Request
from fastapi.responses import FileResponse, PlainTextResponse, Response

from taskboard.api_router import static_router

INDEX_FILENAME = "index.html"


def resolve_static_path(frontend_dir: Path, raw_path: str) -> Path | None:
    """Resolve a request path inside ``frontend_dir``; None if it escapes."""
    root = frontend_dir.resolve()
    relative = raw_path.replace("\\", "/").lstrip("/") or INDEX_FILENAME
    candidate = (root / relative).resolve()
    if not candidate.is_relative_to(root):
        return None
    return candidate


@static_router.get("/{path:path}", include_in_schema=False)
def serve_frontend(path: str, request: Request) -> Response:
    """Serve a frontend file, falling back to index.html for unknown paths."""
    frontend_dir = request.app.state.config.frontend_dir
    if frontend_dir is None:
        return PlainTextResponse("404 Not Found", status_code=404)

    target = resolve_static_path(frontend_dir, path)
    if target is not None and target.is_file():
        return FileResponse(target)

    index_path = frontend_dir / INDEX_FILENAME
    if index_path.is_file():
        return FileResponse(index_path)
    return PlainTextResponse("404 Not Found", status_code=404)
