"""Catalog repository interfaces.

``IProductRepository`` is the Catalog Store consumed by the order
fulfillment engine: it exposes row-locked lookups and an explicit
``adjust_stock`` write. It applies whatever delta it is given; the
non-negative stock rule is checked by the caller before the write.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import Category, Product


class ICategoryRepository(IRepository["Category"]):
    """Repository contract for categories."""

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Category]:
        """Retrieve a category by exact name."""

    @abstractmethod
    def count_products(self, category: Category) -> int:
        """Number of products currently in *category*."""

    @abstractmethod
    def summaries(self) -> List[Dict[str, Any]]:
        """Rows of ``id``, ``name``, ``product_count``, ``average_price``."""


class IProductRepository(IRepository["Product"]):
    """Repository contract for products (the Catalog Store)."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Product]":
        """List products with optional ORM look-ups."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Product]:
        """Retrieve a product with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def lock_many(self, ids: Iterable[int]) -> Dict[int, Product]:
        """Lock every existing product in *ids*, in ascending id order.

        Missing ids are simply absent from the returned mapping.
        """

    @abstractmethod
    def adjust_stock(self, product: Product, delta: int) -> Product:
        """Add *delta* (negative to decrement) to the stock and write it."""

    @abstractmethod
    def by_category(self, category_id: int) -> "models.QuerySet[Product]":
        """Products belonging to a category."""

    @abstractmethod
    def low_stock(self, threshold: int) -> "models.QuerySet[Product]":
        """Products with stock strictly below *threshold*."""

    @abstractmethod
    def unsold(self) -> "models.QuerySet[Product]":
        """Products that no order line references."""
