"""Error taxonomy shared by every module.

Raised by the Service Layer; the API layer (Views) catches these and
translates them into HTTP responses.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for business errors surfaced to callers."""


class NotFound(DomainError):
    """A referenced entity does not exist.

    Recoverable by the caller: retry with a valid key or create the
    entity first.
    """

    entity_kind = "Entity"

    def __init__(self, key: Any, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"{self.entity_kind} {key} not found.")


class InvalidRequest(DomainError):
    """Malformed input rejected before any store access."""


class StorageFailure(DomainError):
    """The underlying store was unavailable or a write failed.

    Raised only after the enclosing transaction has been rolled back,
    so no partial state is retained.
    """
