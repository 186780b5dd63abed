from django.contrib.auth import get_user_model
from rest_framework import generics, permissions

from .serializers import ProfileSerializer, PublicProfileSerializer, SignupSerializer

User = get_user_model()


class SignupView(generics.CreateAPIView):
    """Public signup endpoint."""

    queryset = User.objects.all()
    serializer_class = SignupSerializer
    permission_classes = [permissions.AllowAny]


class MeView(generics.RetrieveUpdateAPIView):
    """Authenticated profile view for the current user."""

    serializer_class = ProfileSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        user = self.request.user
        self.check_object_permissions(self.request, user)
        return user


class PublicProfileView(generics.RetrieveAPIView):
    """Display attributes other participants see for a renter or owner."""

    queryset = User.objects.filter(is_active=True)
    serializer_class = PublicProfileSerializer
    permission_classes = [permissions.IsAuthenticated]
