"""Query filters for the administrative order listing."""

from common.choices import OrderStatus
from django_filters import rest_framework as filters

from .models import Order


class OrderFilterSet(filters.FilterSet):
    status = filters.ChoiceFilter(choices=OrderStatus.choices)
    user = filters.NumberFilter(field_name="user_id")
    created_after = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lt")

    class Meta:
        model = Order
        fields = ["status", "user", "created_after", "created_before"]
