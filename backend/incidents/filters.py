import django_filters as filters

from .models import Incident


class IncidentFilter(filters.FilterSet):
    status = filters.CharFilter(field_name="status", lookup_expr="iexact")
    type = filters.CharFilter(field_name="type", lookup_expr="iexact")
    booking = filters.NumberFilter(field_name="booking_id")
    created_at_after = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_at_before = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Incident
        fields = ["status", "type", "booking"]
