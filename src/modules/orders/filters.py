import django_filters
from django.db.models import Count

from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    account = django_filters.NumberFilter(field_name="account_id")
    product = django_filters.NumberFilter(method="filter_product")
    start = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    end = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")
    min_total = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="gte"
    )
    max_total = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="lte"
    )
    min_lines = django_filters.NumberFilter(method="filter_min_lines")

    class Meta:
        model = Order
        fields = [
            "account",
            "product",
            "start",
            "end",
            "min_total",
            "max_total",
            "min_lines",
        ]

    def filter_product(self, queryset, name, value):
        return queryset.filter(lines__product_id=value).distinct()

    def filter_min_lines(self, queryset, name, value):
        return queryset.annotate(line_total=Count("lines", distinct=True)).filter(
            line_total__gte=value
        )
