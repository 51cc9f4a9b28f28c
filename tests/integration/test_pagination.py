"""Integration tests for standardized pagination."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.catalog.models import Product

pytestmark = pytest.mark.integration


@pytest.fixture()
def product_batch():
    Product.objects.bulk_create(
        Product(name=f"Product {idx:03d}", price=Decimal("9.99"), stock=10)
        for idx in range(1, 121)
    )


class TestPagination:
    def test_default_page_size(self, auth_client, product_batch):
        response = auth_client.get("/api/v1/products/")
        assert response.status_code == 200
        assert response.data["count"] == 120
        assert len(response.data["results"]) == 20
        assert response.data["next"] is not None
        assert response.data["previous"] is None

    def test_custom_page_size(self, auth_client, product_batch):
        response = auth_client.get("/api/v1/products/?page_size=50")
        assert len(response.data["results"]) == 50

    def test_max_page_size(self, auth_client, product_batch):
        response = auth_client.get("/api/v1/products/?page_size=1000")
        assert len(response.data["results"]) == 100
        assert response.data["next"] is not None

    def test_last_page(self, auth_client, product_batch):
        response = auth_client.get("/api/v1/products/?page=6")
        assert len(response.data["results"]) == 20
        assert response.data["next"] is None
