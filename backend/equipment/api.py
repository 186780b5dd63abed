from rest_framework import permissions, viewsets

from .models import Equipment
from .serializers import EquipmentSerializer


class EquipmentViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only catalog view; listing management lives outside this service."""

    serializer_class = EquipmentSerializer
    permission_classes = [permissions.AllowAny]
    queryset = Equipment.objects.select_related("owner").all()
    filterset_fields = ["category", "status", "owner"]
