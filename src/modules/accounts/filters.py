import django_filters

from modules.accounts.models import Account


class AccountFilter(django_filters.FilterSet):
    username = django_filters.CharFilter(field_name="username", lookup_expr="icontains")
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")
    role = django_filters.CharFilter(field_name="role", lookup_expr="iexact")
    is_enabled = django_filters.BooleanFilter(field_name="is_enabled")

    class Meta:
        model = Account
        fields = ["username", "email", "role", "is_enabled"]
