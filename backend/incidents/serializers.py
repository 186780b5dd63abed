from rest_framework import serializers

from .models import Incident


class IncidentSerializer(serializers.ModelSerializer):
    reporter_username = serializers.ReadOnlyField(source="reporter.username")

    class Meta:
        model = Incident
        fields = [
            "id",
            "booking",
            "reporter",
            "reporter_username",
            "type",
            "severity",
            "description",
            "images",
            "status",
            "resolution_amount",
            "notes",
            "resolved_by",
            "resolved_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class IncidentReportSerializer(serializers.Serializer):
    """Input for an ad hoc report; services enforce the type-dependent rules."""

    booking_id = serializers.IntegerField(required=False, allow_null=True)
    type = serializers.ChoiceField(choices=Incident.Type.choices)
    severity = serializers.ChoiceField(
        choices=Incident.Severity.choices, required=False, allow_null=True
    )
    description = serializers.CharField(max_length=1000)
    images = serializers.ListField(
        child=serializers.CharField(max_length=500), required=False, default=list
    )


class IncidentResolveSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[Incident.Status.RESOLVED, Incident.Status.REJECTED]
    )
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)
