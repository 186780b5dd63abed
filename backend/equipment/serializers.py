from rest_framework import serializers

from .models import Equipment


class EquipmentSerializer(serializers.ModelSerializer):
    owner_username = serializers.ReadOnlyField(source="owner.username")

    class Meta:
        model = Equipment
        fields = [
            "id",
            "owner",
            "owner_username",
            "title",
            "brand",
            "description",
            "category",
            "quantity",
            "price_per_day",
            "replacement_price",
            "status",
            "created_at",
        ]
        read_only_fields = fields
