import django_filters as filters
from django.db.models import Q

from .models import Booking


class BookingFilter(filters.FilterSet):
    status = filters.CharFilter(field_name="status", lookup_expr="iexact")
    equipment = filters.NumberFilter(field_name="equipment_id")
    role = filters.ChoiceFilter(
        choices=[("renter", "renter"), ("owner", "owner")],
        method="filter_role",
    )
    start_date_after = filters.DateFilter(field_name="start_date", lookup_expr="gte")
    start_date_before = filters.DateFilter(field_name="start_date", lookup_expr="lte")

    class Meta:
        model = Booking
        fields = ["status", "equipment", "role"]

    def filter_role(self, queryset, name, value):
        user = getattr(self.request, "user", None)
        if not value or user is None:
            return queryset
        if value == "owner":
            return queryset.filter(owner=user)
        return queryset.filter(renter=user)


def participant_q(user) -> Q:
    return Q(owner=user) | Q(renter=user)
