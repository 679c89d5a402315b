"""
django-filter FilterSet for the public event listing.

``price`` accepts ``min-max`` or ``min+``; ``location`` matches the
host restaurant's city or address.
"""
from decimal import Decimal, InvalidOperation

from django.db.models import Q
from django_filters import rest_framework as filters

from .models import Event


def parse_price_range(value: str):
    """Return ``(min, max)`` for ``"10-50"`` or ``(min, None)`` for ``"100+"``; None if unparseable."""
    value = (value or "").strip()
    if not value:
        return None
    try:
        if value.endswith("+"):
            return Decimal(value[:-1]), None
        low, high = value.split("-", 1)
        return Decimal(low), Decimal(high)
    except (InvalidOperation, ValueError):
        return None


class EventFilter(filters.FilterSet):
    search = filters.CharFilter(field_name="title", lookup_expr="icontains")
    location = filters.CharFilter(method="filter_location")
    date = filters.DateFilter(field_name="date")
    date_from = filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = filters.DateFilter(field_name="date", lookup_expr="lte")
    price = filters.CharFilter(method="filter_price")
    restaurant = filters.NumberFilter(field_name="restaurant_id")
    approval_status = filters.CharFilter(field_name="approval_status")

    class Meta:
        model = Event
        fields = []

    def filter_location(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(restaurant__city__icontains=value) | Q(restaurant__address__icontains=value)
        )

    def filter_price(self, queryset, name, value):
        bounds = parse_price_range(value)
        if bounds is None:
            return queryset
        low, high = bounds
        queryset = queryset.filter(price__gte=low)
        if high is not None:
            queryset = queryset.filter(price__lte=high)
        return queryset
