"""Django ORM implementation of the Product repository.

``conditional_decrement`` issues a single compare-and-swap style
``UPDATE ... WHERE stock_quantity >= amount``; the row count tells the
caller whether it won.  No read-modify-write happens in Python, so
concurrent reservations cannot lose updates.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Returns ``None`` for non-existent or malformed IDs."""
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"category": "books"}
            {"name__icontains": "widget"}
        """
        queryset = Product.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info("product.saved", product_id=str(entity.id), sku=entity.sku)
        return entity

    def get_by_sku(self, sku: str) -> Optional[Product]:
        return Product.objects.filter(sku=sku.strip().upper()).first()

    def search_by_name(self, fragment: str) -> List[Product]:
        return list(Product.objects.filter(name__icontains=fragment))

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    def get_stock_levels(self, ids: Iterable[UUID]) -> Dict[UUID, int]:
        rows = Product.objects.filter(id__in=list(ids)).values_list(
            "id", "stock_quantity"
        )
        return dict(rows)

    def conditional_decrement(self, id: UUID, amount: int) -> bool:
        updated = Product.objects.filter(id=id, stock_quantity__gte=amount).update(
            stock_quantity=F("stock_quantity") - amount,
            updated_at=timezone.now(),
        )
        if updated:
            logger.debug("product.stock_decremented", product_id=str(id), amount=amount)
        return updated == 1
