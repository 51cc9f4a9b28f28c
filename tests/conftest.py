from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.accounts.models import Account
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.catalog.models import Category, Product
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    user = get_user_model().objects.create_user(username="apiuser", password="testpass123")
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def account():
    return Account.objects.create(
        username="alice",
        email="alice@example.com",
        password="unused-hash",
    )


@pytest.fixture()
def disabled_account():
    return Account.objects.create(
        username="mallory",
        email="mallory@example.com",
        password="unused-hash",
        is_enabled=False,
    )


@pytest.fixture()
def category():
    return Category.objects.create(name="Electronics")


@pytest.fixture()
def make_product(category):
    """Factory for products in the default category."""

    def _make(name="Widget", price="10.00", stock=10, **extra):
        extra.setdefault("category", category)
        return Product.objects.create(name=name, price=Decimal(price), stock=stock, **extra)

    return _make


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        account_repository=AccountDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )
