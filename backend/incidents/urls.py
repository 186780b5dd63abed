from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api import IncidentViewSet

app_name = "incidents"

router = DefaultRouter()
router.register("", IncidentViewSet, basename="incident")

urlpatterns = [
    path("", include(router.urls)),
]
