"""
Domain error taxonomy.

Services raise these; ``describer.main`` renders them with the same
``{"detail": {"code", "message"}}`` envelope used for auth failures.
"""

from __future__ import annotations

from fastapi import status


class DescriberError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"

    def __init__(
        self,
        message: str,
        *,
        errors: dict[str, list[str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or {}

    def to_detail(self) -> dict[str, object]:
        detail: dict[str, object] = {"code": self.code, "message": self.message}
        if self.errors:
            detail["errors"] = self.errors
        return detail


class InvalidFilterField(DescriberError):
    """A filter key names no searchable attribute, predicate or scope."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_FILTER_FIELD"

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"Unknown filter field: {field}")
        self.field = field


class UniquenessViolation(DescriberError):
    """The database rejected a value that must be unique."""

    status_code = status.HTTP_409_CONFLICT
    code = "UNIQUENESS_VIOLATION"

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(
            message or f"{field} has already been taken",
            errors={field: ["has already been taken"]},
        )
        self.field = field


class ValidationFailure(DescriberError):
    """One or more fields are missing or invalid. Nothing was persisted."""

    status_code = 422
    code = "VALIDATION_FAILED"

    def __init__(self, errors: dict[str, list[str]]) -> None:
        summary = "; ".join(
            f"{field} {message}" for field, messages in errors.items() for message in messages
        )
        super().__init__(f"Validation failed: {summary}", errors=errors)


class AuthorizationDenied(DescriberError):
    """The policy matrix refused the action."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, action: str, kind: str) -> None:
        super().__init__(f"Not allowed to {action} this {kind.replace('_', ' ')}")
        self.action = action
        self.kind = kind


class NotFound(DescriberError):
    """The record does not exist in the caller's visible scope."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind.replace('_', ' ').capitalize()} not found")
        self.kind = kind
