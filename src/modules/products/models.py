"""Product model with SKU uniqueness and stock control.

Business rules implemented:
- SKU must be unique in the catalog (normalised to upper case).
- Price is at least 0.01.
- Stock quantity can never be negative: ``PositiveIntegerField`` plus an
  explicit check constraint, so even a raw UPDATE cannot overdraw stock.
"""

from __future__ import annotations

import structlog
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.products.constants import MIN_PRICE

logger = structlog.get_logger(__name__)


class Product(BaseModel):
    """Catalog entry.

    ``stock_quantity`` is only ever decremented through
    ``IProductRepository.conditional_decrement``.
    """

    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=100, db_index=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(MIN_PRICE)],
    )
    stock_quantity = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=MIN_PRICE),
                name="products_price_min",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.sku:
            self.sku = self.sku.strip().upper()
        super().save(*args, **kwargs)
        if is_new:
            logger.info("product.created", product_id=str(self.id), sku=self.sku)

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"
