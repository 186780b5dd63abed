"""Domain helpers for booking validation and state transitions."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from django.utils import timezone

from core.errors import BookingNotFound, ConcurrentModification, InvalidState, TooEarly

from .models import TERMINAL_STATUSES, Booking

logger = logging.getLogger(__name__)

NOTE_SEPARATOR = " | "

# Statuses that block dates for availability display.
ACTIVE_BOOKING_STATUSES = (
    Booking.Status.PENDING,
    Booking.Status.CONFIRMED,
    Booking.Status.ONGOING,
    Booking.Status.REVIEWING,
)
AWAITING_PAYMENT_STATUSES = (
    Booking.Status.PENDING,
    Booking.Status.CONFIRMED,
)

# Allowed pre-states for each transition.
CHECK_IN_FROM = (Booking.Status.ONGOING,)
CHECK_OUT_FROM = (Booking.Status.REVIEWING,)
FINALIZE_FROM = (Booking.Status.ONGOING,)
ACTIVATE_FROM = AWAITING_PAYMENT_STATUSES
EXPIRE_FROM = AWAITING_PAYMENT_STATUSES


def append_note(current: Optional[str], addition: Optional[str]) -> str:
    """Notes are append-only and pipe-joined."""
    addition = (addition or "").strip()
    current = current or ""
    if not addition:
        return current
    if not current:
        return addition
    return f"{current}{NOTE_SEPARATOR}{addition}"


def lock_booking(booking_id) -> Booking:
    """Load a booking for update; callers must hold a transaction."""
    try:
        return (
            Booking.objects.select_for_update()
            .select_related("equipment")
            .get(pk=booking_id)
        )
    except (Booking.DoesNotExist, TypeError, ValueError):
        raise BookingNotFound(booking_id=str(booking_id)) from None


def _assert_status(booking: Booking, allowed: Iterable[str], action: str) -> None:
    allowed = tuple(allowed)
    if booking.status in allowed:
        return
    expected = ", ".join(str(item) for item in allowed)
    raise InvalidState(
        f"Only {expected} bookings can be {action}.",
        status=booking.status,
    )


def assert_can_check_in(booking: Booking) -> None:
    _assert_status(booking, CHECK_IN_FROM, "checked in")


def assert_can_check_out(booking: Booking) -> None:
    _assert_status(booking, CHECK_OUT_FROM, "checked out")


def assert_can_finalize(booking: Booking, *, now: Optional[datetime] = None) -> None:
    """Finalize needs an ongoing booking whose rental window has closed."""
    _assert_status(booking, FINALIZE_FROM, "completed")
    now = now or timezone.now()
    if now <= booking.scheduled_end_at:
        raise TooEarly(end_date=booking.end_date.isoformat())


def apply_transition(
    booking: Booking,
    *,
    allowed_from: Iterable[str],
    to: str,
    **fields,
) -> Booking:
    """
    Move the booking to ``to`` only if its stored status is still one of
    ``allowed_from``; zero matched rows means another writer got there first.
    """
    allowed_from = tuple(allowed_from)
    if booking.status in TERMINAL_STATUSES:
        raise InvalidState("Booking is in a terminal state.", status=booking.status)
    now = timezone.now()
    updated = Booking.objects.filter(pk=booking.pk, status__in=allowed_from).update(
        status=to,
        updated_at=now,
        **fields,
    )
    if not updated:
        raise ConcurrentModification(booking_id=str(booking.pk))

    previous = booking.status
    booking.status = to
    booking.updated_at = now
    for name, value in fields.items():
        setattr(booking, name, value)
    logger.info(
        "booking %s: %s -> %s",
        booking.pk,
        previous,
        to,
        extra={"booking_id": booking.pk},
    )
    return booking
