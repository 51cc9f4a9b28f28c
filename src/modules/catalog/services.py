"""Catalog service layer (Use Cases).

Category and product management. Commands run inside a unit of work and
return ``Ok``/``Err`` results; list queries return querysets so the API
layer can filter and paginate them.

Business rules enforced here:
- Category names are unique.
- A category with products cannot be deleted.
- Restocking adds at least one unit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.conf import settings
from django.db.models import QuerySet

from modules.catalog.dtos import CategorySummaryDTO
from modules.catalog.exceptions import (
    CategoryAlreadyExists,
    CategoryInUse,
    CategoryNotFound,
    InvalidRestockQuantity,
    ProductNotFound,
)
from modules.catalog.models import Category, Product
from modules.core.decorators import returns_result, unit_of_work
from modules.core.money import money

if TYPE_CHECKING:
    from modules.catalog.dtos import (
        CreateCategoryDTO,
        CreateProductDTO,
        UpdateProductDTO,
    )
    from modules.catalog.repositories.interfaces import (
        ICategoryRepository,
        IProductRepository,
    )

logger = structlog.get_logger(__name__)


class CategoryService:
    """Application service for Category use-cases."""

    def __init__(
        self,
        category_repository: ICategoryRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._category_repo = category_repository
        self._product_repo = product_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @unit_of_work
    def create_category(self, dto: CreateCategoryDTO) -> Category:
        """Raises ``CategoryAlreadyExists`` when the name is taken."""
        if self._category_repo.get_by_name(dto.name):
            logger.warning("category.duplicate_name", name=dto.name)
            raise CategoryAlreadyExists(
                f"Category '{dto.name}' already exists.", name=dto.name
            )

        category = self._category_repo.save(Category(name=dto.name))
        logger.info("category.created", category_id=category.id)
        return category

    @unit_of_work
    def delete_category(self, id: int) -> None:
        category = self._require(id)
        product_count = self._category_repo.count_products(category)
        if product_count > 0:
            raise CategoryInUse(
                f"Category '{category.name}' still has {product_count} products.",
                category_id=id,
                product_count=product_count,
            )
        self._category_repo.delete(category)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_categories(self) -> QuerySet[Category]:
        return self._category_repo.list()

    @returns_result
    def get_category(self, id: int) -> Category:
        return self._require(id)

    @returns_result
    def products_in_category(self, id: int) -> QuerySet[Product]:
        self._require(id)
        return self._product_repo.by_category(id)

    def summary(self) -> List[CategorySummaryDTO]:
        """Product count and average price for every category."""
        return [
            CategorySummaryDTO(
                category_id=row["id"],
                name=row["name"],
                product_count=row["product_count"],
                average_price=(
                    None
                    if row["average_price"] is None
                    else money(row["average_price"])
                ),
            )
            for row in self._category_repo.summaries()
        ]

    def _require(self, id: int) -> Category:
        category = self._category_repo.get_by_id(id)
        if not category:
            raise CategoryNotFound(f"Category {id} not found.", category_id=id)
        return category


class ProductService:
    """Application service for Product use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        product_repository: IProductRepository,
        category_repository: ICategoryRepository,
    ) -> None:
        self._product_repo = product_repository
        self._category_repo = category_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @unit_of_work
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a product, optionally inside an existing category.

        Raises:
            CategoryNotFound: ``category_id`` does not exist.
        """
        category = self._resolve_category(dto.category_id)
        product = Product(
            name=dto.name,
            description=dto.description,
            price=dto.price,
            stock=dto.stock,
            category=category,
        )
        product = self._product_repo.save(product)
        logger.info("product.created", product_id=product.id, stock=product.stock)
        return product

    @unit_of_work
    def update_product(self, id: int, dto: UpdateProductDTO) -> Product:
        """Apply the fields present in *dto*; others stay untouched."""
        product = self._product_repo.get_for_update(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.", product_id=id)

        provided = dto.model_fields_set
        for field in ("name", "description", "price", "stock"):
            value = getattr(dto, field)
            if field in provided and value is not None:
                setattr(product, field, value)
        if "category_id" in provided:
            product.category = self._resolve_category(dto.category_id)

        product = self._product_repo.save(product)
        logger.info("product.updated", product_id=id, fields=sorted(provided))
        return product

    @unit_of_work
    def delete_product(self, id: int) -> None:
        product = self._product_repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.", product_id=id)
        self._product_repo.delete(product)

    @unit_of_work
    def restock(self, id: int, quantity: int) -> Product:
        """Add *quantity* units to a product's stock under a row lock.

        Raises:
            InvalidRestockQuantity: *quantity* is below one.
            ProductNotFound: the product does not exist.
        """
        if quantity < 1:
            raise InvalidRestockQuantity(
                "Restock quantity must be at least 1.", quantity=quantity
            )
        product = self._product_repo.get_for_update(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.", product_id=id)

        product = self._product_repo.adjust_stock(product, quantity)
        logger.info(
            "product.restocked",
            product_id=id,
            quantity=quantity,
            stock=product.stock,
        )
        return product

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Product]:
        return self._product_repo.list(filters)

    @returns_result
    def get_product(self, id: int) -> Product:
        product = self._product_repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.", product_id=id)
        return product

    def low_stock(self, threshold: Optional[int] = None) -> QuerySet[Product]:
        if threshold is None:
            threshold = settings.LOW_STOCK_THRESHOLD
        return self._product_repo.low_stock(threshold)

    def unsold(self) -> QuerySet[Product]:
        return self._product_repo.unsold()

    def _resolve_category(self, category_id: Optional[int]) -> Optional[Category]:
        if category_id is None:
            return None
        category = self._category_repo.get_by_id(category_id)
        if not category:
            raise CategoryNotFound(
                f"Category {category_id} not found.", category_id=category_id
            )
        return category
