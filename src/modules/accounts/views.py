"""Account API views.

Exposes ``AccountService`` via a DRF ViewSet. Writes go through the
service; results are rendered with ``result_response``.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.dtos import CreateAccountDTO, UpdateAccountDTO
from modules.accounts.filters import AccountFilter
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.accounts.serializers import (
    AccountSerializer,
    CreateAccountSerializer,
    UpdateAccountSerializer,
)
from modules.accounts.services import AccountService
from modules.core.api import result_response
from modules.core.pagination import StandardResultsSetPagination
from modules.orders.repositories.django_repository import OrderDjangoRepository


class AccountViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Account operations."""

    serializer_class = AccountSerializer
    pagination_class = StandardResultsSetPagination
    filterset_class = AccountFilter
    ordering_fields = ["username", "created_at"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AccountService(
            account_repository=AccountDjangoRepository(),
            order_repository=OrderDjangoRepository(),
        )

    def get_queryset(self):
        return self._service.list_accounts()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/accounts/{pk}/"""
        return result_response(self._service.get_account(int(pk)), AccountSerializer)

    def create(self, request: Request) -> Response:
        """POST /api/v1/accounts/"""
        serializer = CreateAccountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreateAccountDTO(**serializer.validated_data)
        return result_response(
            self._service.create_account(dto),
            AccountSerializer,
            status.HTTP_201_CREATED,
        )

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/accounts/{pk}/"""
        serializer = UpdateAccountSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        dto = UpdateAccountDTO(**serializer.validated_data)
        return result_response(
            self._service.update_account(int(pk), dto), AccountSerializer
        )

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/accounts/{pk}/

        Rejected while the account has orders; disable it instead.
        """
        return result_response(
            self._service.delete_account(int(pk)),
            success_status=status.HTTP_204_NO_CONTENT,
        )

    @action(detail=True, methods=["get"])
    def profile(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/accounts/{pk}/profile/"""
        return result_response(self._service.profile(int(pk)))

    @action(
        detail=False,
        methods=["get"],
        url_path=r"by-username/(?P<username>[\w.@+-]+)",
    )
    def by_username(self, request: Request, username: str) -> Response:
        """GET /api/v1/accounts/by-username/{username}/"""
        return result_response(
            self._service.get_by_username(username), AccountSerializer
        )
