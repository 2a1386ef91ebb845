"""Product service layer (Use Cases).

The catalog is an external collaborator of the order workflow: products
are created here and looked up by id, SKU, name fragment or category.
Stock is never written by this service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import IntegrityError, transaction

from modules.products.exceptions import ProductAlreadyExists, ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import CreateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a new product.

        Raises:
            ProductAlreadyExists: if the SKU is already taken.
        """
        log = logger.bind(sku=dto.sku)

        if self._repo.get_by_sku(dto.sku):
            log.warning("product.duplicate_sku")
            raise ProductAlreadyExists(f"SKU '{dto.sku}' already registered.")

        product = Product(
            sku=dto.sku,
            name=dto.name,
            description=dto.description,
            category=dto.category,
            price=dto.price,
            stock_quantity=dto.stock_quantity,
        )
        try:
            with transaction.atomic():
                product = self._repo.save(product)
        except IntegrityError as exc:
            log.warning("product.duplicate_sku", race=True)
            raise ProductAlreadyExists(f"SKU '{dto.sku}' already registered.") from exc

        return product

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: str) -> Product:
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(id)
        return product

    def get_product_by_sku(self, sku: str) -> Product:
        product = self._repo.get_by_sku(sku)
        if not product:
            raise ProductNotFound(sku, f"Product with SKU {sku} not found.")
        return product

    def search_products(self, name: str) -> List[Product]:
        """Case-insensitive substring match on the product name."""
        return self._repo.search_by_name(name)

    def list_products_by_category(self, category: str) -> List[Product]:
        return self._repo.list({"category__iexact": category})

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        return self._repo.list(filters)
