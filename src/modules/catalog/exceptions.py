"""Catalog domain exceptions.

Raised by the catalog services inside a unit of work; the boundary turns
them into ``Err`` results.
"""

from __future__ import annotations

from modules.core.exceptions import (
    BusinessRuleViolation,
    Duplicate,
    NotFound,
    ValidationFailed,
)


class ProductNotFound(NotFound):
    """The requested product does not exist."""


class CategoryNotFound(NotFound):
    """The requested category does not exist."""


class CategoryAlreadyExists(Duplicate):
    """Another category already uses this name."""


class CategoryInUse(BusinessRuleViolation):
    """The category still has products and cannot be deleted."""


class InvalidRestockQuantity(ValidationFailed):
    """Restock quantity must be at least one unit."""
