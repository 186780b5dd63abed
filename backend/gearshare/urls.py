from django.conf import settings
from django.contrib import admin
from django.urls import include, path

from core.cron_api import advance_confirmed_bookings_view, expire_pending_payments_view

urlpatterns = [
    path("api/users/", include("users.urls")),
    path("api/equipment/", include("equipment.urls")),
    path("api/insurance/", include("insurance.urls")),
    path("api/bookings/", include(("bookings.urls", "bookings"), namespace="bookings")),
    path("api/incidents/", include(("incidents.urls", "incidents"), namespace="incidents")),
    path("api/payments/", include(("payments.urls", "payments"), namespace="payments")),
    path("api/cron/update-booking-status/", advance_confirmed_bookings_view),
    path("api/cron/expire-payments/", expire_pending_payments_view),
]

if settings.ENABLE_DJANGO_ADMIN:
    urlpatterns.insert(0, path("admin/", admin.site.urls))
