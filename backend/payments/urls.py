from django.urls import path

from .api import owner_payouts, payment_check, payment_init

app_name = "payments"

urlpatterns = [
    path("init/", payment_init, name="init"),
    path("check/", payment_check, name="check"),
    path("payouts/", owner_payouts, name="owner_payouts"),
]
