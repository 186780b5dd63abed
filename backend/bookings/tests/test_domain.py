from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone

from bookings.domain import (
    CHECK_IN_FROM,
    append_note,
    apply_transition,
    assert_can_finalize,
    lock_booking,
)
from bookings.models import Booking
from core.errors import BookingNotFound, ConcurrentModification, InvalidState, TooEarly

pytestmark = pytest.mark.django_db


def test_append_note_joins_with_pipe():
    assert append_note("", "picked up") == "picked up"
    assert append_note("picked up", "  ") == "picked up"
    assert append_note("picked up", "returned") == "picked up | returned"


def test_lock_booking_missing_raises_not_found():
    with pytest.raises(BookingNotFound):
        lock_booking(987654)


def test_finalize_before_window_closes_is_too_early(booking_factory):
    today = timezone.localdate()
    booking = booking_factory(
        start_date=today - timedelta(days=1),
        end_date=today,
        status=Booking.Status.ONGOING,
    )

    with pytest.raises(TooEarly):
        assert_can_finalize(booking)

    later = booking.scheduled_end_at + timedelta(minutes=1)
    assert_can_finalize(booking, now=later)


def test_finalize_requires_ongoing(booking_factory):
    today = timezone.localdate()
    booking = booking_factory(
        start_date=today - timedelta(days=5),
        end_date=today - timedelta(days=3),
        status=Booking.Status.CONFIRMED,
    )

    with pytest.raises(InvalidState):
        assert_can_finalize(booking)


def test_transition_from_stale_status_reports_concurrent_modification(booking_factory):
    today = timezone.localdate()
    booking = booking_factory(start_date=today, end_date=today, status=Booking.Status.ONGOING)
    Booking.objects.filter(pk=booking.pk).update(status=Booking.Status.REVIEWING)

    with pytest.raises(ConcurrentModification):
        apply_transition(booking, allowed_from=CHECK_IN_FROM, to=Booking.Status.REVIEWING)


@pytest.mark.parametrize(
    "status",
    [Booking.Status.COMPLETED, Booking.Status.CANCELED, Booking.Status.FAILED],
)
def test_terminal_bookings_never_transition(booking_factory, status):
    today = timezone.localdate()
    booking = booking_factory(start_date=today, end_date=today, status=status)

    with pytest.raises(InvalidState):
        apply_transition(
            booking,
            allowed_from=[status],
            to=Booking.Status.ONGOING,
        )

    booking.refresh_from_db()
    assert booking.status == status
