"""Domain exceptions.

Core modules raise these; the web layer maps each one to an HTTP status.
"""

from __future__ import annotations


class ForgezError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ForgezError):
    """Raised when input data is missing or invalid (400)."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class NotFoundError(ForgezError):
    """Raised when a referenced entity does not exist (404)."""

    def __init__(self, entity: str, entity_id: str | int | None = None):
        self.entity = entity
        self.entity_id = entity_id
        if entity_id is None:
            super().__init__(f"{entity} not found")
        else:
            super().__init__(f"{entity} '{entity_id}' not found")


class PermissionDeniedError(ForgezError):
    """Raised when the caller may not access or modify an entity (403)."""


class ConflictError(ForgezError):
    """Raised when the operation conflicts with current state (409)."""


class GoneError(ForgezError):
    """Raised when a resource existed but is no longer available (410)."""
