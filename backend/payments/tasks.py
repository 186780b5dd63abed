from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from bookings.services import fail_unpaid_booking
from payments.models import Payment

logger = logging.getLogger(__name__)


@shared_task(name="payments.expire_pending_payments")
def expire_pending_payments() -> int:
    """
    Fail pending payments older than PAYMENT_EXPIRY_MINUTES along with their
    bookings, when those are still awaiting payment.

    Safe to run concurrently with itself: a payment only counts when this run
    moved it out of pending. Returns the number of payments expired.
    """
    cutoff = timezone.now() - timedelta(minutes=settings.PAYMENT_EXPIRY_MINUTES)
    stale = list(
        Payment.objects.filter(status=Payment.Status.PENDING, created_at__lt=cutoff)
        .values_list("pk", "booking_id")
    )

    expired = 0
    for payment_id, booking_id in stale:
        try:
            with transaction.atomic():
                updated = Payment.objects.filter(
                    pk=payment_id, status=Payment.Status.PENDING
                ).update(status=Payment.Status.FAILED, updated_at=timezone.now())
                if not updated:
                    continue
                fail_unpaid_booking(booking_id)
        except DatabaseError:
            logger.exception("failed to expire payment %s", payment_id)
            continue
        expired += 1
        logger.info(
            "payment %s expired", payment_id, extra={"booking_id": booking_id}
        )
    return expired
