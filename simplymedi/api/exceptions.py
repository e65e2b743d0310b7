from typing import Any

from pydantic import ValidationError

from simplymedi.processor.exceptions import InvalidStatusTransitionError, ReportNotFoundError


class ValidationFailure(Exception):
    """Raised when a request is rejected before any report is created."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailure":
        errors = [
            {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        return cls("Validation failed", errors)


__all__ = ["InvalidStatusTransitionError", "ReportNotFoundError", "ValidationFailure"]
