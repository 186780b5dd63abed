"""Owner payouts for completed bookings."""

from __future__ import annotations

import logging

from django.db.models import Count, Q, Sum

from .models import Payout

logger = logging.getLogger(__name__)


def ensure_payout(booking) -> tuple[Payout, bool]:
    """
    Return the booking's payout, creating it on first call.

    Both completion paths call this; the one-to-one link on booking keeps
    it to a single payout whichever path finishes first. The owner receives
    base_price only; service and insurance fees stay with the platform.
    """
    payout, created = Payout.objects.get_or_create(
        booking=booking,
        defaults={
            "owner_id": booking.owner_id,
            "amount": booking.base_price,
            "status": Payout.Status.PENDING,
            "notes": f"Payout for rental booking #{booking.pk}",
        },
    )
    if created:
        logger.info(
            "payout %s created for booking %s: %s to owner %s",
            payout.pk,
            booking.pk,
            payout.amount,
            booking.owner_id,
            extra={"booking_id": booking.pk},
        )
    return payout, created


def payouts_for_owner(owner):
    return Payout.objects.filter(owner=owner).select_related("booking", "booking__equipment")


def summarize_payouts(queryset) -> dict[str, int]:
    stats = queryset.aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(status=Payout.Status.PENDING)),
        completed=Count("id", filter=Q(status=Payout.Status.COMPLETED)),
        failed=Count("id", filter=Q(status=Payout.Status.FAILED)),
        total_amount=Sum("amount"),
        pending_amount=Sum("amount", filter=Q(status=Payout.Status.PENDING)),
    )
    return {key: int(value or 0) for key, value in stats.items()}


def payout_for_booking(booking_id):
    return Payout.objects.filter(booking_id=booking_id).first()
