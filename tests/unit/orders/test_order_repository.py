"""Unit tests for OrderDjangoRepository.

Covers the explicit fetch variants, explicit save of an order with its
lines, outbox flushing and the raw aggregates (NULL on no rows).
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.core.models import OutboxEvent
from modules.orders.events import OrderPlaced
from modules.orders.models import Order, OrderLine
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


@pytest.fixture()
def saved_order(repo, account, make_product):
    product = make_product(name="Lamp", price="12.00", stock=5)
    order = Order(account=account, total_amount=Decimal("24.00"))
    return repo.save(order, [OrderLine(product=product, quantity=2, unit_price=product.price)])


class TestSave:
    def test_save_persists_order_and_lines(self, saved_order):
        line = OrderLine.objects.get(order=saved_order)
        assert line.quantity == 2
        assert line.subtotal == Decimal("24.00")

    def test_save_flushes_domain_events_to_outbox(self, repo, saved_order):
        saved_order.add_domain_event(OrderPlaced(aggregate_id=saved_order.id))

        repo.save(saved_order)

        assert OutboxEvent.objects.filter(event_type="OrderPlaced", topic="orders").count() == 1
        assert saved_order.domain_events == []

    def test_delete_removes_lines(self, repo, saved_order):
        repo.delete(saved_order)

        assert not Order.objects.exists()
        assert not OrderLine.objects.exists()


class TestFetchVariants:
    def test_get_by_id_missing_returns_none(self, repo):
        assert repo.get_by_id(123456) is None
        assert repo.get_by_id(123456, with_lines=True) is None

    def test_with_lines_prefetches_lines_and_products(
        self, repo, saved_order, django_assert_num_queries
    ):
        with django_assert_num_queries(3):
            order = repo.get_by_id(saved_order.id, with_lines=True)
            names = [line.product.name for line in order.lines.all()]
            username = order.account.username

        assert names == ["Lamp"]
        assert username == "alice"

    def test_get_for_update_loads_lines(self, repo, saved_order):
        order = repo.get_for_update(saved_order.id)

        assert [line.quantity for line in order.lines.all()] == [2]


class TestAggregates:
    def test_sums_are_none_without_rows(self, repo, account):
        assert repo.count_by_account(account.id) == 0
        assert repo.sum_total_by_account(account.id) is None
        assert repo.avg_total_by_account(account.id) is None

    def test_sums_for_account(self, repo, saved_order, account):
        assert repo.count_by_account(account.id) == 1
        assert repo.sum_total_by_account(account.id) == Decimal("24.00")

    def test_top_by_total_orders_descending(self, repo, account):
        low = repo.save(Order(account=account, total_amount=Decimal("5.00")))
        high = repo.save(Order(account=account, total_amount=Decimal("50.00")))

        assert [order.id for order in repo.top_by_total(5)] == [high.id, low.id]
