"""API viewsets and permissions for bookings."""

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.errors import MissingRequiredField
from equipment.services import get_equipment
from incidents.serializers import IncidentSerializer
from payments.serializers import PayoutSerializer

from . import services as booking_services
from .domain import ACTIVE_BOOKING_STATUSES
from .filters import BookingFilter, participant_q
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingDetailSerializer,
    BookingSerializer,
    CheckInSerializer,
    CheckOutSerializer,
)

logger = logging.getLogger(__name__)


class IsBookingParticipant(permissions.BasePermission):
    """Allow access only to users tied to the booking (or staff)."""

    def has_permission(self, request, view) -> bool:
        """Always allow; actual checks happen at object level."""
        return True

    def has_object_permission(self, request, view, obj: Booking) -> bool:
        """Check that the user is the booking owner or renter."""
        user = request.user
        if getattr(user, "is_staff", False):
            return True
        return getattr(user, "id", None) in (obj.owner_id, obj.renter_id)


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Booking creation, queries and handover transitions."""

    serializer_class = BookingSerializer
    permission_classes = (permissions.IsAuthenticated, IsBookingParticipant)
    filterset_class = BookingFilter
    ordering_fields = ["created_at", "start_date", "total_price"]

    def get_queryset(self):
        """Restrict bookings to the authenticated participant."""
        user = self.request.user
        if not user.is_authenticated:
            return Booking.objects.none()
        return (
            Booking.objects.select_related("equipment", "owner", "renter")
            .filter(participant_q(user))
            .order_by("-created_at")
        )

    def get_serializer_class(self):
        if self.action == "retrieve":
            return BookingDetailSerializer
        return BookingSerializer

    def get_object(self):
        """Fetch a single booking and enforce participant permissions."""
        obj = get_object_or_404(
            Booking.objects.select_related("equipment", "owner", "renter"),
            pk=self.kwargs["pk"],
        )
        self.check_object_permissions(self.request, obj)
        return obj

    def _booking_payload(self, booking: Booking) -> dict:
        booking.refresh_from_db()
        return BookingSerializer(booking, context=self.get_serializer_context()).data

    def create(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = booking_services.create_booking(
            renter=request.user,
            equipment_id=data["equipment_id"],
            start_date=data["start_date"],
            end_date=data["end_date"],
            quantity=data.get("quantity", 1),
            owner_id=data.get("owner_id"),
            insurance_id=data.get("insurance_id"),
            notes=data.get("notes"),
        )
        return Response(
            {"success": True, "data": self._booking_payload(booking)},
            status=status.HTTP_201_CREATED,
        )

    @action(
        detail=False,
        methods=["get"],
        url_path="availability",
        permission_classes=[permissions.AllowAny],
    )
    def availability(self, request, *args, **kwargs):
        """Return booked [start, end] ranges for an equipment item."""
        equipment_param = request.query_params.get("equipment")
        if not equipment_param:
            raise MissingRequiredField(
                "equipment query parameter is required.", field="equipment"
            )
        equipment = get_equipment(equipment_param)
        ranges = (
            Booking.objects.filter(
                equipment=equipment,
                status__in=ACTIVE_BOOKING_STATUSES,
            )
            .order_by("start_date", "end_date")
            .values("start_date", "end_date", "quantity")
        )
        payload = [
            {
                "start_date": item["start_date"].isoformat(),
                "end_date": item["end_date"].isoformat(),
                "quantity": item["quantity"],
            }
            for item in ranges
        ]
        return Response(payload, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request, *args, **kwargs):
        """Record the equipment handover."""
        booking = self.get_object()
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = booking_services.check_in(
            booking.pk,
            images=data.get("images"),
            notes=data.get("notes"),
            incident=data.get("incident"),
        )
        return Response(
            {
                "success": True,
                "data": {
                    "booking": self._booking_payload(result.booking),
                    "incident": (
                        IncidentSerializer(result.incident).data if result.incident else None
                    ),
                },
            }
        )

    @action(detail=True, methods=["post"], url_path="check-out")
    def check_out(self, request, *args, **kwargs):
        """Record the return and the extra charges it triggers."""
        booking = self.get_object()
        serializer = CheckOutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = booking_services.check_out(
            booking.pk,
            images=data.get("images"),
            notes=data.get("notes"),
            severity=data.get("severity"),
            issue_description=data.get("issue_description"),
            late_minutes=data.get("late_minutes"),
            late_reason=data.get("late_reason"),
        )
        return Response(
            {
                "success": True,
                "data": {
                    "booking": self._booking_payload(result.booking),
                    "incidents": IncidentSerializer(result.incidents, many=True).data,
                    "extra_charges": result.charges.as_dict(),
                },
            }
        )

    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request, *args, **kwargs):
        """Complete an ongoing booking whose end date has passed."""
        booking = self.get_object()
        result = booking_services.finalize_completion(booking.pk)
        return Response(
            {
                "success": True,
                "data": {
                    "booking": self._booking_payload(result.booking),
                    "payout": PayoutSerializer(result.payout).data,
                },
            }
        )
