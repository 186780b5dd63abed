"""Celery tasks for bookings."""

from __future__ import annotations

import logging

from celery import shared_task
from django.utils import timezone

from .models import Booking

logger = logging.getLogger(__name__)


@shared_task(name="bookings.advance_confirmed_bookings")
def advance_confirmed_bookings() -> int:
    """
    Move confirmed bookings whose start date has arrived to ongoing.

    Runs independently of payment state. Returns the number of bookings moved.
    """
    today = timezone.localdate()
    updated = Booking.objects.filter(
        status=Booking.Status.CONFIRMED,
        start_date__lte=today,
    ).update(status=Booking.Status.ONGOING, updated_at=timezone.now())
    if updated:
        logger.info("advanced %s confirmed booking(s) to ongoing", updated)
    return updated
