"""Error taxonomy raised by the services and rendered by the API."""

from __future__ import annotations

from typing import Any, Optional, Sequence


class ConversaError(Exception):
    """Base error. Carries the HTTP status the API answers with."""

    status_code: int = 400
    error: str = "Bad Request"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "message": self.detail,
            "error": self.error,
        }


class InvalidIdFormat(ConversaError):
    """Identifier is not a 24-character hexadecimal object id."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Invalid {field} ID format")
        self.field = field


class MissingIdentifier(ConversaError):
    """Customer or advisor has none of name, email, phone."""

    def __init__(self, party: str) -> None:
        super().__init__(
            f"{party.capitalize()} must have at least one identifier "
            "(name, email, or phone)"
        )
        self.party = party


class DuplicateField(ConversaError):
    def __init__(self, fields: Optional[Sequence[str]] = None) -> None:
        self.fields = list(fields or [])
        target = ", ".join(self.fields) if self.fields else "field"
        super().__init__(f"Duplicate {target} found")


class ForeignKeyViolation(ConversaError):
    def __init__(self, detail: str = "Foreign key constraint failed") -> None:
        super().__init__(detail)


class NotFound(ConversaError):
    status_code = 404
    error = "Not Found"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f'{entity} with ID "{entity_id}" not found')
        self.entity = entity
        self.entity_id = entity_id


class ValidationFailure(ConversaError):
    """Request body, path or query did not match the expected shape."""

    def __init__(self, detail: str, errors: Optional[list[Any]] = None) -> None:
        super().__init__(detail)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload


class Unauthorized(ConversaError):
    status_code = 401
    error = "Unauthorized"


class Unexpected(ConversaError):
    """Any other persistence failure, reported with a fixed per-operation message."""
