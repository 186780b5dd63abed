"""Serializers for booking-related API endpoints."""

from __future__ import annotations

from rest_framework import serializers

from incidents.models import Incident
from incidents.serializers import IncidentSerializer
from incidents.services import incidents_for_booking
from payments.payouts import payout_for_booking
from payments.serializers import PaymentSerializer, PayoutSerializer
from payments.services import live_payment_for_booking

from .models import Booking
from .pricing import SEVERITY_NONE


class BookingSerializer(serializers.ModelSerializer):
    """Serialize Booking instances for API usage."""

    equipment_title = serializers.ReadOnlyField(source="equipment.title")
    equipment_brand = serializers.ReadOnlyField(source="equipment.brand")
    owner_username = serializers.ReadOnlyField(source="owner.username")
    owner_display_name = serializers.ReadOnlyField(source="owner.display_name")
    renter_username = serializers.ReadOnlyField(source="renter.username")
    renter_display_name = serializers.ReadOnlyField(source="renter.display_name")
    total_days = serializers.ReadOnlyField(source="days")

    class Meta:
        model = Booking
        fields = (
            "id",
            "status",
            "equipment",
            "equipment_title",
            "equipment_brand",
            "owner",
            "owner_username",
            "owner_display_name",
            "renter",
            "renter_username",
            "renter_display_name",
            "insurance",
            "insurance_snapshot",
            "quantity",
            "start_date",
            "end_date",
            "total_days",
            "base_price",
            "service_fee",
            "insurance_fee",
            "discount",
            "total_price",
            "checkin_time",
            "checkin_images",
            "checkout_time",
            "checkout_images",
            "notes",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class BookingDetailSerializer(BookingSerializer):
    """Booking plus its incidents, payment and payout."""

    incidents = serializers.SerializerMethodField()
    payment = serializers.SerializerMethodField()
    payout = serializers.SerializerMethodField()

    class Meta(BookingSerializer.Meta):
        fields = BookingSerializer.Meta.fields + ("incidents", "payment", "payout")
        read_only_fields = fields

    def get_incidents(self, obj: Booking):
        return IncidentSerializer(incidents_for_booking(obj.pk), many=True).data

    def get_payment(self, obj: Booking):
        payment = live_payment_for_booking(obj.pk)
        return PaymentSerializer(payment).data if payment else None

    def get_payout(self, obj: Booking):
        payout = payout_for_booking(obj.pk)
        return PayoutSerializer(payout).data if payout else None


class BookingCreateSerializer(serializers.Serializer):
    equipment_id = serializers.IntegerField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    quantity = serializers.IntegerField(required=False, default=1)
    owner_id = serializers.IntegerField(required=False, allow_null=True)
    insurance_id = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)


class CheckInIncidentSerializer(serializers.Serializer):
    type = serializers.ChoiceField(
        choices=[c for c in Incident.Type.choices if c[0] != Incident.Type.QUESTION],
        required=False,
    )
    severity = serializers.ChoiceField(choices=Incident.Severity.choices, required=False)
    description = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    estimated_charge = serializers.IntegerField(required=False, allow_null=True, min_value=0)


class CheckInSerializer(serializers.Serializer):
    images = serializers.ListField(
        child=serializers.CharField(max_length=500), required=False, default=list
    )
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)
    incident = CheckInIncidentSerializer(required=False)


class CheckOutSerializer(serializers.Serializer):
    images = serializers.ListField(
        child=serializers.CharField(max_length=500), required=False, default=list
    )
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)
    severity = serializers.ChoiceField(
        choices=[SEVERITY_NONE, *Incident.Severity.values],
        required=False,
        default=SEVERITY_NONE,
    )
    issue_description = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    late_minutes = serializers.IntegerField(required=False, default=0, min_value=0)
    late_reason = serializers.CharField(required=False, allow_blank=True, max_length=500)
