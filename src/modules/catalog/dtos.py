"""Catalog DTOs for the Service Layer.

Pydantic v2 contracts between the API layer and the catalog services.
DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category name must not be blank.")
        return v


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation.

    ``category_id`` is optional; when given the category must exist.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    category_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Product name must not be blank.")
        return v


class UpdateProductDTO(BaseModel):
    """Immutable DTO for partial product updates.

    Only fields present in ``model_fields_set`` are applied, so an explicit
    ``category_id=None`` detaches the product from its category.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    stock: Optional[int] = Field(default=None, ge=0)
    category_id: Optional[int] = None


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class CategorySummaryDTO(BaseModel):
    """Per-category product count and average price.

    ``average_price`` is ``None`` for a category without products.
    """

    model_config = ConfigDict(frozen=True)

    category_id: int
    name: str
    product_count: int
    average_price: Optional[Decimal]
