"""Structured error types for taskboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class ErrorInfo:
    """Serializable error payload attached to taskboard exceptions."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class TaskboardError(RuntimeError):
    """Exception carrying structured error information."""

    def __init__(
        self, code: str, message: str, details: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.error = ErrorInfo(code=code, message=message, details=dict(details or {}))


class CodecError(TaskboardError):
    """Raised by strict decoding when a document is malformed."""
