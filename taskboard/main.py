"""FastAPI entrypoint for the taskboard service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard.api import register_api_handlers
from taskboard.config import AppConfig, load_config
from taskboard.logging_setup import setup_logging
from taskboard.persistence import JsonFilePersistence
from taskboard.store import Store

logger = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_config = config or load_config()
        setup_logging(app_config.log_level, app_config.log_dir)
        persistence = JsonFilePersistence.in_directory(
            app_config.data_dir,
            atomic=app_config.atomic_writes,
            strict=app_config.strict_decode,
        )
        app.state.config = app_config
        app.state.store = Store.open(persistence)
        logger.info(
            "Taskboard ready data_dir=%s frontend_dir=%s",
            app_config.data_dir,
            app_config.frontend_dir,
        )
        yield

    app = FastAPI(lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/health", status_code=200)
    def health() -> dict[str, str]:
        return {"status": "ok"}

    register_api_handlers(app)
    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    config = load_config()
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    run()
