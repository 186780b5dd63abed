from rest_framework import serializers

from .models import Payment, Payout


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "booking",
            "renter",
            "owner",
            "amount",
            "content",
            "ref",
            "status",
            "method",
            "external_txn_id",
            "paid_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PayoutSerializer(serializers.ModelSerializer):
    equipment_title = serializers.ReadOnlyField(source="booking.equipment.title")

    class Meta:
        model = Payout
        fields = [
            "id",
            "owner",
            "booking",
            "equipment_title",
            "incident",
            "amount",
            "status",
            "notes",
            "processed_at",
            "created_at",
        ]
        read_only_fields = fields
