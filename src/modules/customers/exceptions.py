"""Customer domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import DomainError, NotFound


class CustomerAlreadyExists(DomainError):
    """A customer with the same email already exists."""


class CustomerNotFound(NotFound):
    """The referenced customer does not exist."""

    entity_kind = "Customer"
