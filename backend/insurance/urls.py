from django.urls import path

from .api import ActiveInsuranceListView

app_name = "insurance"

urlpatterns = [
    path("", ActiveInsuranceListView.as_view(), name="insurance-list"),
]
