"""Product repository interface (Catalog Store contract).

Besides look-ups, the catalog owns the only write path for stock:
``conditional_decrement`` must be atomic at the storage level.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU (case-insensitive)."""

    @abstractmethod
    def search_by_name(self, fragment: str) -> List[Product]:
        """Products whose name contains ``fragment`` (case-insensitive)."""

    @abstractmethod
    def get_stock_levels(self, ids: Iterable[UUID]) -> Dict[UUID, int]:
        """Read current stock for every id in a single query.

        Unknown ids are absent from the result.
        """

    @abstractmethod
    def conditional_decrement(self, id: UUID, amount: int) -> bool:
        """Decrement stock by ``amount`` only if enough is available.

        Returns ``False`` (and changes nothing) when current stock is
        lower than ``amount`` or the product does not exist.
        """
