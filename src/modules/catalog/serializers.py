"""Catalog DRF serializers for API input/output.

Input serializers validate the HTTP payload; the validated data is turned
into Pydantic DTOs from ``dtos.py`` before reaching the services.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.catalog.models import Category, Product

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateCategorySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)


class CreateProductSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, default="", allow_blank=True)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01")
    )
    stock = serializers.IntegerField(min_value=0, required=False, default=0)
    category_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class UpdateProductSerializer(serializers.Serializer):
    """Partial update payload; absent fields are left untouched."""

    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01"), required=False
    )
    stock = serializers.IntegerField(min_value=0, required=False)
    category_id = serializers.IntegerField(required=False, allow_null=True)


class RestockSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "created_at"]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for products, flattening the category."""

    category_name = serializers.CharField(
        source="category.name", read_only=True, allow_null=True
    )

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "stock",
            "category_id",
            "category_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
