"""Product domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import DomainError, NotFound


class ProductAlreadyExists(DomainError):
    """A product with the same SKU already exists."""


class ProductNotFound(NotFound):
    """The referenced product does not exist."""

    entity_kind = "Product"
