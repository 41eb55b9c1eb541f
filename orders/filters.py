import django_filters

from .models import Order, STATUS_CHOICES


class AdminOrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=STATUS_CHOICES)
    category = django_filters.CharFilter(field_name="service__category")
    user = django_filters.NumberFilter(field_name="user_id")
    transaction_id = django_filters.CharFilter(lookup_expr="iexact")
    date_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Order
        fields = ["status", "category", "user", "transaction_id", "date_from", "date_to"]
