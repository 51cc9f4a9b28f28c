"""Unit tests for OrderService (the order fulfillment engine).

Covers:
- Order creation: stock decrement, price snapshot, total computation.
- Rejections: empty order, bad quantity, unknown/disabled account,
  unknown product, insufficient stock.
- All-or-nothing: a failing line leaves every product's stock untouched.
- Cancellation: stock restored, order and lines gone.
- Several lines for the same product share stock and price.
- Orphaned lines block cancellation.
- Listing queries.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from modules.catalog.models import Product
from modules.core.models import OutboxEvent
from modules.core.results import ErrorKind
from modules.orders.dtos import CreateOrderDTO, CreateOrderLineDTO
from modules.orders.models import Order, OrderLine

pytestmark = pytest.mark.unit


def _dto(account_id, *lines):
    return CreateOrderDTO(
        account_id=account_id,
        lines=[CreateOrderLineDTO(product_id=pid, quantity=qty) for pid, qty in lines],
    )


@pytest.fixture()
def product(make_product):
    return make_product(name="Gamer PC", price="5000.00", stock=10)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreateOrder:
    def test_single_line_order_reserves_stock(self, order_service, account, product):
        result = order_service.create_order(_dto(account.id, (product.id, 3)))

        assert result.is_ok
        order = result.value
        assert order.total_amount == Decimal("15000.00")
        assert order.account_id == account.id
        product.refresh_from_db()
        assert product.stock == 7

    def test_lines_carry_price_snapshot_and_subtotal(self, order_service, account, make_product):
        mouse = make_product(name="Mouse", price="25.50", stock=5)
        pad = make_product(name="Pad", price="4.25", stock=5)

        result = order_service.create_order(_dto(account.id, (mouse.id, 2), (pad.id, 4)))

        lines = sorted(result.value.lines.all(), key=lambda line: line.product_id)
        assert [(line.unit_price, line.subtotal) for line in lines] == [
            (Decimal("25.50"), Decimal("51.00")),
            (Decimal("4.25"), Decimal("17.00")),
        ]
        assert result.value.total_amount == Decimal("68.00")

    def test_later_price_change_does_not_touch_order(self, order_service, account, product):
        order = order_service.create_order(_dto(account.id, (product.id, 1))).value

        Product.objects.filter(id=product.id).update(price=Decimal("1.00"))

        line = OrderLine.objects.get(order_id=order.id)
        order.refresh_from_db()
        assert line.unit_price == Decimal("5000.00")
        assert order.total_amount == Decimal("5000.00")

    def test_exact_remaining_stock_can_be_ordered(self, order_service, account, product):
        result = order_service.create_order(_dto(account.id, (product.id, 10)))

        assert result.is_ok
        product.refresh_from_db()
        assert product.stock == 0

    def test_records_order_placed_event(self, order_service, account, product):
        order = order_service.create_order(_dto(account.id, (product.id, 1))).value

        event = OutboxEvent.objects.get(event_type="OrderPlaced")
        assert event.aggregate_id == str(order.id)
        assert event.payload["account_id"] == account.id
        assert event.payload["product_ids"] == [product.id]
        assert event.payload["total_amount"] == "5000.00"


class TestCreateOrderRejections:
    def test_insufficient_stock_leaves_stock_untouched(self, order_service, account, product):
        Product.objects.filter(id=product.id).update(stock=7)

        result = order_service.create_order(_dto(account.id, (product.id, 9999)))

        assert result.kind == ErrorKind.INSUFFICIENT_STOCK
        assert result.details["requested"] == 9999
        assert result.details["available"] == 7
        assert "Gamer PC" in result.message
        product.refresh_from_db()
        assert product.stock == 7
        assert not Order.objects.exists()

    def test_empty_order_rejected_before_store_access(
        self, order_service, account, django_assert_num_queries
    ):
        with django_assert_num_queries(0):
            result = order_service.create_order(_dto(account.id))

        assert result.kind == ErrorKind.VALIDATION

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_quantity_below_one_rejected(self, order_service, account, product, quantity):
        result = order_service.create_order(_dto(account.id, (product.id, quantity)))

        assert result.kind == ErrorKind.VALIDATION
        assert result.details["line"] == 1
        product.refresh_from_db()
        assert product.stock == 10

    def test_unknown_account_is_not_found(self, order_service, product):
        result = order_service.create_order(_dto(999_999, (product.id, 1)))

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.details == {"account_id": 999_999}

    def test_disabled_account_is_business_rule(self, order_service, disabled_account, product):
        result = order_service.create_order(_dto(disabled_account.id, (product.id, 2)))

        assert result.kind == ErrorKind.BUSINESS_RULE
        product.refresh_from_db()
        assert product.stock == 10
        assert not Order.objects.exists()

    def test_unknown_product_is_not_found(self, order_service, account, product):
        result = order_service.create_order(_dto(account.id, (product.id, 1), (999_999, 1)))

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.details == {"product_id": 999_999}

    def test_failing_line_rolls_back_earlier_lines(self, order_service, account, make_product):
        a = make_product(name="A", price="10.00", stock=10)
        b = make_product(name="B", price="20.00", stock=10)
        c = make_product(name="C", price="5.00", stock=0)

        result = order_service.create_order(_dto(account.id, (a.id, 1), (b.id, 1), (c.id, 1)))

        assert result.kind == ErrorKind.INSUFFICIENT_STOCK
        assert result.details["product_id"] == c.id
        for item in (a, b, c):
            before = item.stock
            item.refresh_from_db()
            assert item.stock == before
        assert not Order.objects.exists()
        assert not OrderLine.objects.exists()
        assert not OutboxEvent.objects.exists()


class TestOrderAmountLimits:
    def test_line_subtotal_too_large_rejected(self, order_service, account, make_product):
        item = make_product(name="Yacht", price="9999999999.99", stock=100_000)

        result = order_service.create_order(_dto(account.id, (item.id, 100_000)))

        assert result.kind == ErrorKind.VALIDATION
        assert result.details["line"] == 1
        assert result.details["product_id"] == item.id
        item.refresh_from_db()
        assert item.stock == 100_000
        assert not Order.objects.exists()

    def test_total_too_large_rolls_back_earlier_lines(self, order_service, account, make_product):
        item = make_product(name="Jet", price="9999999999.99", stock=200)

        result = order_service.create_order(_dto(account.id, (item.id, 60), (item.id, 60)))

        assert result.kind == ErrorKind.VALIDATION
        assert result.details["line"] == 2
        item.refresh_from_db()
        assert item.stock == 200
        assert not OrderLine.objects.exists()

    def test_total_at_capacity_is_accepted(self, order_service, account, make_product):
        item = make_product(name="Island", price="9999999999.99", stock=100)

        result = order_service.create_order(_dto(account.id, (item.id, 100)))

        assert result.is_ok
        assert result.value.total_amount == Decimal("999999999999.00")


class TestRepeatedProductLines:
    def test_lines_share_stock(self, order_service, account, make_product):
        item = make_product(name="Cable", price="3.00", stock=5)

        result = order_service.create_order(_dto(account.id, (item.id, 3), (item.id, 3)))

        assert result.kind == ErrorKind.INSUFFICIENT_STOCK
        assert result.details["available"] == 2
        item.refresh_from_db()
        assert item.stock == 5

    def test_lines_share_price_snapshot(self, order_service, account, make_product):
        item = make_product(name="Cable", price="3.00", stock=5)

        order = order_service.create_order(_dto(account.id, (item.id, 2), (item.id, 3))).value

        assert {line.unit_price for line in order.lines.all()} == {Decimal("3.00")}
        assert order.total_amount == Decimal("15.00")
        item.refresh_from_db()
        assert item.stock == 0


# ---------------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------------


class TestCancelOrder:
    def test_cancel_restores_stock_and_deletes_order(self, order_service, account, product):
        order = order_service.create_order(_dto(account.id, (product.id, 3))).value

        result = order_service.cancel_order(order.id)

        assert result.is_ok
        product.refresh_from_db()
        assert product.stock == 10
        assert not Order.objects.filter(id=order.id).exists()
        assert not OrderLine.objects.filter(order_id=order.id).exists()
        assert order_service.get_order(order.id).kind == ErrorKind.NOT_FOUND

    def test_cancel_restores_every_line(self, order_service, account, make_product):
        a = make_product(name="A", stock=4)
        b = make_product(name="B", stock=6)
        order = order_service.create_order(_dto(account.id, (a.id, 4), (b.id, 1), (b.id, 2))).value

        order_service.cancel_order(order.id)

        a.refresh_from_db()
        b.refresh_from_db()
        assert (a.stock, b.stock) == (4, 6)

    def test_cancel_records_event(self, order_service, account, product):
        order = order_service.create_order(_dto(account.id, (product.id, 1))).value

        order_service.cancel_order(order.id)

        event = OutboxEvent.objects.get(event_type="OrderCancelled")
        assert event.aggregate_id == str(order.id)
        assert event.payload["product_ids"] == [product.id]

    def test_cancel_unknown_order_is_not_found(self, order_service):
        result = order_service.cancel_order(424242)

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.details == {"order_id": 424242}

    def test_second_cancel_is_not_found(self, order_service, account, product):
        order = order_service.create_order(_dto(account.id, (product.id, 2))).value
        order_service.cancel_order(order.id)

        result = order_service.cancel_order(order.id)

        assert result.kind == ErrorKind.NOT_FOUND
        product.refresh_from_db()
        assert product.stock == 10

    def test_orphaned_line_blocks_cancellation(self, order_service, account, make_product):
        kept = make_product(name="Kept", stock=5)
        gone = make_product(name="Gone", stock=5)
        order = order_service.create_order(_dto(account.id, (kept.id, 2), (gone.id, 1))).value
        gone.delete()

        result = order_service.cancel_order(order.id)

        assert result.kind == ErrorKind.BUSINESS_RULE
        assert Order.objects.filter(id=order.id).exists()
        kept.refresh_from_db()
        assert kept.stock == 3


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestOrderQueries:
    def test_get_order_loads_lines(self, order_service, account, product, django_assert_num_queries):
        order_id = order_service.create_order(_dto(account.id, (product.id, 1))).value.id

        result = order_service.get_order(order_id)

        with django_assert_num_queries(0):
            names = [line.product.name for line in result.value.lines.all()]
        assert names == ["Gamer PC"]

    def test_orders_for_account_newest_first(self, order_service, account, product):
        first = order_service.create_order(_dto(account.id, (product.id, 1))).value
        second = order_service.create_order(_dto(account.id, (product.id, 1))).value
        Order.objects.filter(id=first.id).update(created_at=timezone.now() - timedelta(days=1))

        result = order_service.orders_for_account(account.id)

        assert [order.id for order in result.value] == [second.id, first.id]

    def test_orders_for_unknown_account(self, order_service):
        assert order_service.orders_for_account(999_999).kind == ErrorKind.NOT_FOUND

    def test_large_orders_uses_min_lines(self, order_service, account, make_product):
        items = [make_product(name=f"P{i}", stock=10) for i in range(3)]
        small = order_service.create_order(_dto(account.id, (items[0].id, 1))).value
        large = order_service.create_order(
            _dto(account.id, *[(item.id, 1) for item in items])
        ).value

        result = order_service.large_orders(3)

        ids = [order.id for order in result.value]
        assert large.id in ids
        assert small.id not in ids

    def test_large_orders_rejects_non_positive_limit(self, order_service):
        assert order_service.large_orders(0).kind == ErrorKind.VALIDATION
