"""Service-level exceptions and their JSON error bodies."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any


@dataclass
class FieldError:
    field: str
    message: str
    code: str = "invalid"

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


class ServiceError(Exception):
    """Base class for errors a service raises on purpose."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, field_errors: list[FieldError] | None = None) -> None:
        self.message = message or self.default_message
        self.field_errors = field_errors or []
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.field_errors:
            body["fieldErrors"] = [fe.to_dict() for fe in self.field_errors]
        return body


class ValidationError(ServiceError):
    status_code = HTTPStatus.BAD_REQUEST
    code = "validation_error"
    default_message = "Invalid data"


class ForbiddenError(ServiceError):
    status_code = HTTPStatus.FORBIDDEN
    code = "forbidden"
    default_message = "Access denied"


class NotFoundError(ServiceError):
    status_code = HTTPStatus.NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class ConflictError(ServiceError):
    status_code = HTTPStatus.CONFLICT
    code = "conflict"
    default_message = "Resource conflict"


class StoreUnavailableError(ServiceError):
    status_code = HTTPStatus.SERVICE_UNAVAILABLE
    code = "store_unavailable"
    default_message = "Document store is not configured"


def not_found(resource: str, identifier: str) -> NotFoundError:
    return NotFoundError(f"{resource} '{identifier}' not found")
