"""Catalog API views.

Exposes ``CategoryService`` and ``ProductService`` via DRF ViewSets.
Service results are rendered by ``result_response``; the views never
catch generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.catalog.dtos import CreateCategoryDTO, CreateProductDTO, UpdateProductDTO
from modules.catalog.filters import ProductFilter
from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    ProductDjangoRepository,
)
from modules.catalog.serializers import (
    CategorySerializer,
    CreateCategorySerializer,
    CreateProductSerializer,
    ProductSerializer,
    RestockSerializer,
    UpdateProductSerializer,
)
from modules.catalog.services import CategoryService, ProductService
from modules.core.api import result_response
from modules.core.pagination import StandardResultsSetPagination


class CategoryViewSet(ListModelMixin, GenericViewSet):
    """Categories: list, retrieve, create, delete, products and summary."""

    serializer_class = CategorySerializer
    pagination_class = StandardResultsSetPagination
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CategoryService(
            category_repository=CategoryDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def get_queryset(self):
        return self._service.list_categories()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/categories/{pk}/"""
        return result_response(self._service.get_category(int(pk)), CategorySerializer)

    def create(self, request: Request) -> Response:
        """POST /api/v1/categories/"""
        serializer = CreateCategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreateCategoryDTO(**serializer.validated_data)
        return result_response(
            self._service.create_category(dto),
            CategorySerializer,
            status.HTTP_201_CREATED,
        )

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/categories/{pk}/

        Rejected while the category still has products.
        """
        return result_response(
            self._service.delete_category(int(pk)),
            success_status=status.HTTP_204_NO_CONTENT,
        )

    @action(detail=True, methods=["get"])
    def products(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/categories/{pk}/products/"""
        result = self._service.products_in_category(int(pk))
        if not result.is_ok:
            return result_response(result)
        page = self.paginate_queryset(result.value)
        return self.get_paginated_response(ProductSerializer(page, many=True).data)

    @action(detail=False, methods=["get"])
    def summary(self, request: Request) -> Response:
        """GET /api/v1/categories/summary/"""
        rows = self._service.summary()
        return Response([row.model_dump(mode="json") for row in rows])


class ProductViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Product operations.

    Uses ``ProductService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: writes go through the service.
    """

    serializer_class = ProductSerializer
    pagination_class = StandardResultsSetPagination
    filterset_class = ProductFilter
    search_fields = ["name", "description"]
    ordering_fields = ["name", "price", "stock", "created_at"]
    ordering = ["name", "id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(
            product_repository=ProductDjangoRepository(),
            category_repository=CategoryDjangoRepository(),
        )

    def get_queryset(self):
        return self._service.list_products()

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        return result_response(self._service.get_product(int(pk)), ProductSerializer)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        serializer = CreateProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreateProductDTO(**serializer.validated_data)
        return result_response(
            self._service.create_product(dto),
            ProductSerializer,
            status.HTTP_201_CREATED,
        )

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        serializer = UpdateProductSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        dto = UpdateProductDTO(**serializer.validated_data)
        return result_response(
            self._service.update_product(int(pk), dto), ProductSerializer
        )

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/"""
        return result_response(
            self._service.delete_product(int(pk)),
            success_status=status.HTTP_204_NO_CONTENT,
        )

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def restock(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/products/{pk}/restock/  body: ``{"quantity": N}``"""
        serializer = RestockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return result_response(
            self._service.restock(int(pk), serializer.validated_data["quantity"]),
            ProductSerializer,
        )

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request: Request) -> Response:
        """GET /api/v1/products/low-stock/?threshold=N"""
        raw = request.query_params.get("threshold")
        threshold = int(raw) if raw and raw.isdigit() else None
        page = self.paginate_queryset(self._service.low_stock(threshold))
        return self.get_paginated_response(ProductSerializer(page, many=True).data)

    @action(detail=False, methods=["get"])
    def unsold(self, request: Request) -> Response:
        """GET /api/v1/products/unsold/"""
        page = self.paginate_queryset(self._service.unsold())
        return self.get_paginated_response(ProductSerializer(page, many=True).data)
