"""Shared routers and request helpers for taskboard endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

from taskboard.store import Store

JSON_MEDIA_TYPE = "application/json; charset=utf-8"

api_router = APIRouter()
# Registered after api_router so its catch-all path matches last.
static_router = APIRouter()


def get_request_store(request: Request) -> Store:
    return request.app.state.store
