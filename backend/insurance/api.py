from rest_framework import generics, permissions, serializers

from .models import InsurancePolicy


class InsurancePolicySerializer(serializers.ModelSerializer):
    class Meta:
        model = InsurancePolicy
        fields = ["id", "name", "description", "min_coverage", "max_coverage", "status"]
        read_only_fields = fields


class ActiveInsuranceListView(generics.ListAPIView):
    """List the insurance policies renters can currently choose from."""

    serializer_class = InsurancePolicySerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None

    def get_queryset(self):
        return InsurancePolicy.objects.filter(status=InsurancePolicy.Status.ACTIVE)
