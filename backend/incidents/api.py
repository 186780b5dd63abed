"""API views for incident reporting and admin resolution."""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .filters import IncidentFilter
from .models import Incident
from .serializers import IncidentReportSerializer, IncidentResolveSerializer, IncidentSerializer
from .services import report_incident, resolve_incident


class IncidentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Users see the incidents they reported; staff see every incident and are
    the only ones allowed to resolve them.
    """

    serializer_class = IncidentSerializer
    permission_classes = (permissions.IsAuthenticated,)
    filterset_class = IncidentFilter
    ordering_fields = ["created_at", "status"]

    def get_queryset(self):
        qs = Incident.objects.select_related("reporter", "booking").order_by("-created_at")
        user = self.request.user
        if user.is_staff:
            return qs
        return qs.filter(reporter=user)

    def get_object(self):
        obj = get_object_or_404(self.get_queryset(), pk=self.kwargs["pk"])
        self.check_object_permissions(self.request, obj)
        return obj

    def create(self, request, *args, **kwargs):
        serializer = IncidentReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        incident = report_incident(
            reporter=request.user,
            type=data["type"],
            description=data["description"],
            booking_id=data.get("booking_id"),
            severity=data.get("severity"),
            images=data.get("images"),
        )
        return Response(
            {"success": True, "data": IncidentSerializer(incident).data},
            status=status.HTTP_201_CREATED,
        )

    @action(
        detail=True,
        methods=["post"],
        url_path="resolve",
        permission_classes=[permissions.IsAdminUser],
    )
    def resolve(self, request, *args, **kwargs):
        serializer = IncidentResolveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        incident = resolve_incident(
            kwargs["pk"],
            status=serializer.validated_data["status"],
            resolution_notes=serializer.validated_data.get("notes"),
            resolved_by=request.user,
        )
        return Response({"success": True, "data": IncidentSerializer(incident).data})
