import django_filters

from modules.catalog.models import Product


class ProductFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    category = django_filters.NumberFilter(field_name="category_id")
    category_name = django_filters.CharFilter(
        field_name="category__name", lookup_expr="iexact"
    )
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    stock_below = django_filters.NumberFilter(field_name="stock", lookup_expr="lt")
    unsold = django_filters.BooleanFilter(method="filter_unsold")

    class Meta:
        model = Product
        fields = [
            "name",
            "category",
            "category_name",
            "min_price",
            "max_price",
            "stock_below",
            "unsold",
        ]

    def filter_unsold(self, queryset, name, value):
        if value is None:
            return queryset
        return queryset.filter(order_lines__isnull=value).distinct()
