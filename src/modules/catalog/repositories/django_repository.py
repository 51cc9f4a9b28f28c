"""Django ORM implementation of the catalog repositories.

Lookups follow the Null Object pattern: methods return ``None`` instead of
raising, and the service decides how to translate a missing entity.

Row locks (``select_for_update``) are only meaningful inside a
transaction; callers hold them through a unit of work.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.db import transaction
from django.db.models import Avg, Count, QuerySet

from modules.catalog.models import Category, Product
from modules.catalog.repositories.interfaces import (
    ICategoryRepository,
    IProductRepository,
)

logger = structlog.get_logger(__name__)


class CategoryDjangoRepository(ICategoryRepository):
    """Concrete Category repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Category]:
        return Category.objects.filter(id=id).first()

    def get_by_name(self, name: str) -> Optional[Category]:
        return Category.objects.filter(name=name).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Category]:
        queryset = Category.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Category) -> Category:
        entity.save()
        logger.info("category.saved", category_id=entity.id, name=entity.name)
        return entity

    @transaction.atomic
    def delete(self, entity: Category) -> None:
        category_id = entity.id
        entity.delete()
        logger.info("category.deleted", category_id=category_id)

    def count_products(self, category: Category) -> int:
        return Product.objects.filter(category=category).count()

    def summaries(self) -> List[Dict[str, Any]]:
        return list(
            Category.objects.annotate(
                product_count=Count("products"),
                average_price=Avg("products__price"),
            )
            .values("id", "name", "product_count", "average_price")
            .order_by("name")
        )


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Product]:
        """Retrieve a product (with its category) by primary key."""
        return Product.objects.select_related("category").filter(id=id).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Product]:
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"category_id": 3}
            {"name__icontains": "keyboard"}
        """
        queryset = Product.objects.select_related("category")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.save()
        logger.info("product.saved", product_id=entity.id, name=entity.name)
        return entity

    @transaction.atomic
    def delete(self, entity: Product) -> None:
        product_id = entity.id
        entity.delete()
        logger.info("product.deleted", product_id=product_id)

    # ------------------------------------------------------------------
    # Stock (used by the order fulfillment engine)
    # ------------------------------------------------------------------

    def get_for_update(self, id: int) -> Optional[Product]:
        return Product.objects.select_for_update().filter(id=id).first()

    def lock_many(self, ids: Iterable[int]) -> Dict[int, Product]:
        """Lock rows in ascending id order so concurrent callers cannot deadlock."""
        wanted = sorted(set(ids))
        if not wanted:
            return {}
        locked = Product.objects.select_for_update().filter(id__in=wanted).order_by("id")
        return {product.id: product for product in locked}

    def adjust_stock(self, product: Product, delta: int) -> Product:
        product.stock += delta
        product.save(update_fields=["stock", "updated_at"])
        return product

    # ------------------------------------------------------------------
    # Catalog queries
    # ------------------------------------------------------------------

    def by_category(self, category_id: int) -> QuerySet[Product]:
        return self.list({"category_id": category_id})

    def low_stock(self, threshold: int) -> QuerySet[Product]:
        return self.list({"stock__lt": threshold}).order_by("stock", "id")

    def unsold(self) -> QuerySet[Product]:
        return self.list({"order_lines__isnull": True})
