"""Order API views.

Exposes ``OrderService`` and ``OrderReportService`` via a DRF ViewSet.
Service results are rendered by ``result_response``; the view never
swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.core.api import error_response, result_response
from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import CreateOrderDTO, CreateOrderLineDTO
from modules.orders.filters import OrderFilter
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    AccountQuerySerializer,
    CreateOrderSerializer,
    LargeOrdersQuerySerializer,
    OrderListSerializer,
    OrderSerializer,
    SalesReportQuerySerializer,
    TopOrdersQuerySerializer,
)
from modules.orders.services import OrderReportService, OrderService


class OrderViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: orders are only created and
    cancelled through the fulfillment engine.
    """

    serializer_class = OrderListSerializer
    pagination_class = StandardResultsSetPagination
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total_amount"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        order_repository = OrderDjangoRepository()
        account_repository = AccountDjangoRepository()
        self._service = OrderService(
            order_repository=order_repository,
            account_repository=account_repository,
            product_repository=ProductDjangoRepository(),
        )
        self._reports = OrderReportService(
            order_repository=order_repository,
            account_repository=account_repository,
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttle scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        return self._service.list_orders()

    # ------------------------------------------------------------------
    # Create / Cancel
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Body: ``{"account_id": 1, "lines": [{"product_id": 2, "quantity": 3}]}``.
        Returns 201 with the order and its lines.
        """
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        dto = CreateOrderDTO(
            account_id=data["account_id"],
            lines=[CreateOrderLineDTO(**line) for line in data["lines"]],
        )
        return result_response(
            self._service.create_order(dto),
            OrderSerializer,
            status.HTTP_201_CREATED,
        )

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/

        Cancels the order: stock of every line is restored and the order
        is deleted.
        """
        return result_response(
            self._service.cancel_order(int(pk)),
            success_status=status.HTTP_204_NO_CONTENT,
        )

    # ------------------------------------------------------------------
    # Retrieve / listings
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        return result_response(self._service.get_order(int(pk)), OrderSerializer)

    @action(detail=False, methods=["get"], url_path=r"account/(?P<account_id>\d+)")
    def by_account(self, request: Request, account_id: str | None = None) -> Response:
        """GET /api/v1/orders/account/{account_id}/ (newest first)"""
        result = self._service.orders_for_account(int(account_id))
        if not result.is_ok:
            return error_response(result)
        page = self.paginate_queryset(result.value)
        return self.get_paginated_response(OrderListSerializer(page, many=True).data)

    @action(detail=False, methods=["get"])
    def large(self, request: Request) -> Response:
        """GET /api/v1/orders/large/?min_lines=N"""
        query = LargeOrdersQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = self._service.large_orders(query.validated_data.get("min_lines"))
        if not result.is_ok:
            return error_response(result)
        page = self.paginate_queryset(result.value)
        return self.get_paginated_response(OrderListSerializer(page, many=True).data)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"])
    def summary(self, request: Request) -> Response:
        """GET /api/v1/orders/summary/?account={id}"""
        query = AccountQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return result_response(
            self._reports.account_summary(query.validated_data["account"])
        )

    @action(detail=False, methods=["get"])
    def report(self, request: Request) -> Response:
        """GET /api/v1/orders/report/?start=...&end=... (ISO 8601, inclusive)"""
        query = SalesReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return result_response(
            self._reports.sales_report(
                query.validated_data["start"], query.validated_data["end"]
            )
        )

    @action(detail=False, methods=["get"])
    def top(self, request: Request) -> Response:
        """GET /api/v1/orders/top/?limit=N"""
        query = TopOrdersQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = self._reports.top_orders(query.validated_data.get("limit"))
        if not result.is_ok:
            return error_response(result)
        return Response([row.model_dump(mode="json") for row in result.value])
