"""Order and OrderLine models.

Business rules implemented:
- An order belongs to exactly one account (PROTECT keeps history intact).
- Each line snapshots the unit price at creation (``unit_price``); the
  product's live price is never read again.
- ``subtotal`` is always ``quantity * unit_price`` (calculated on save).
- ``total_amount`` is the sum of the line subtotals at creation and is
  never recomputed.
- Orders are created and destroyed as a whole; cancelling deletes the
  order and CASCADE removes its lines.
- Deleting a product keeps historical lines (``product`` becomes NULL).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    Lines are always loaded through the repository
    (``get_by_id(..., with_lines=True)``).
    """

    account = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["account", "-created_at"], name="orders_account_created_idx"),
            models.Index(fields=["-total_amount"], name="orders_total_idx"),
        ]

    def __str__(self) -> str:
        return f"Order #{self.pk} ({self.total_amount})"


class OrderLine(BaseModel):
    """Line linking an Order to a Product with a price snapshot.

    ``unit_price`` must be supplied by the caller; a line without a
    snapshot cannot be saved.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="lines",
    )
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.SET_NULL,
        related_name="order_lines",
        null=True,
        blank=True,
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, editable=False)

    class Meta:
        db_table = "order_lines"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_lines_quantity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        if self.unit_price is None:
            raise ValidationError({"unit_price": "A unit price snapshot is required."})
        self.subtotal = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} ({self.subtotal})"
