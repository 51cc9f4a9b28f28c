"""Unit tests for AccountService."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.accounts.dtos import CreateAccountDTO, RoleEnum, UpdateAccountDTO
from modules.accounts.models import Account
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.accounts.services import AccountService
from modules.core.results import ErrorKind
from modules.orders.dtos import CreateOrderDTO, CreateOrderLineDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def account_service():
    return AccountService(
        account_repository=AccountDjangoRepository(),
        order_repository=OrderDjangoRepository(),
    )


def _create_dto(**overrides):
    data = {
        "username": "bob",
        "email": "bob@example.com",
        "password": "correct-horse",
    }
    data.update(overrides)
    return CreateAccountDTO(**data)


class TestCreateAccount:
    def test_password_is_hashed(self, account_service):
        account = account_service.create_account(_create_dto()).value

        assert account.password != "correct-horse"
        assert account.check_password("correct-horse")
        assert account.role == RoleEnum.USER
        assert account.is_enabled

    def test_duplicate_username(self, account_service, account):
        result = account_service.create_account(_create_dto(username=account.username))

        assert result.kind == ErrorKind.DUPLICATE
        assert result.details == {"field": "username"}

    def test_duplicate_email(self, account_service, account):
        result = account_service.create_account(_create_dto(email=account.email))

        assert result.kind == ErrorKind.DUPLICATE
        assert result.details == {"field": "email"}


class TestUpdateAccount:
    def test_disable_account(self, account_service, account):
        updated = account_service.update_account(account.id, UpdateAccountDTO(is_enabled=False)).value

        assert updated.is_enabled is False

    def test_email_taken_by_other_account(self, account_service, account, disabled_account):
        result = account_service.update_account(
            account.id, UpdateAccountDTO(email=disabled_account.email)
        )

        assert result.kind == ErrorKind.DUPLICATE

    def test_unknown_account(self, account_service):
        assert account_service.update_account(999, UpdateAccountDTO(alias="x")).kind == ErrorKind.NOT_FOUND


class TestDeleteAccount:
    def test_delete_account_without_orders(self, account_service, account):
        assert account_service.delete_account(account.id).is_ok
        assert not Account.objects.filter(id=account.id).exists()

    def test_account_with_orders_is_kept(self, account_service, order_service, account, make_product):
        product = make_product()
        order_service.create_order(
            CreateOrderDTO(
                account_id=account.id,
                lines=[CreateOrderLineDTO(product_id=product.id, quantity=1)],
            )
        )

        result = account_service.delete_account(account.id)

        assert result.kind == ErrorKind.BUSINESS_RULE
        assert Account.objects.filter(id=account.id).exists()


class TestAccountQueries:
    def test_get_by_username(self, account_service, account):
        assert account_service.get_by_username("alice").value.id == account.id
        assert account_service.get_by_username("nobody").kind == ErrorKind.NOT_FOUND

    def test_profile_without_orders_reports_zeros(self, account_service, account):
        profile = account_service.profile(account.id).value

        assert profile.order_count == 0
        assert profile.total_spent == Decimal("0.00")
        assert profile.average_order_amount == Decimal("0.00")

    def test_profile_with_orders(self, account_service, order_service, account, make_product):
        product = make_product(price="20.00", stock=10)
        for quantity in (1, 2):
            order_service.create_order(
                CreateOrderDTO(
                    account_id=account.id,
                    lines=[CreateOrderLineDTO(product_id=product.id, quantity=quantity)],
                )
            )

        profile = account_service.profile(account.id).value

        assert profile.order_count == 2
        assert profile.total_spent == Decimal("60.00")
        assert profile.average_order_amount == Decimal("30.00")
