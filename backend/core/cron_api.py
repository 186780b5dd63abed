"""HTTP triggers for the periodic jobs, for schedulers outside Celery beat."""

from __future__ import annotations

import hmac
import logging

from django.conf import settings
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import BasePermission
from rest_framework.response import Response

from bookings.tasks import advance_confirmed_bookings
from payments.tasks import expire_pending_payments

logger = logging.getLogger(__name__)

CRON_SECRET_HEADER = "X-Cron-Secret"


class HasCronSecret(BasePermission):
    """Require the shared secret; an unset secret denies every caller."""

    message = "Invalid cron secret."

    def has_permission(self, request, view) -> bool:
        expected = getattr(settings, "CRON_SECRET", "") or ""
        provided = request.headers.get(CRON_SECRET_HEADER, "") or ""
        if not expected:
            logger.warning("cron trigger called but CRON_SECRET is not configured")
            return False
        return hmac.compare_digest(provided.encode(), expected.encode())


@api_view(["GET", "POST"])
@authentication_classes([])
@permission_classes([HasCronSecret])
def advance_confirmed_bookings_view(request):
    count = advance_confirmed_bookings()
    return Response({"success": True, "data": {"confirmed_to_ongoing": count}})


@api_view(["GET", "POST"])
@authentication_classes([])
@permission_classes([HasCronSecret])
def expire_pending_payments_view(request):
    count = expire_pending_payments()
    return Response({"success": True, "data": {"expired_count": count}})
