"""Booking lifecycle: creation, check-in, check-out and completion."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from django.utils import timezone

from bookings.models import Booking
from bookings.services import (
    activate_after_payment,
    check_in,
    check_out,
    create_booking,
    fail_unpaid_booking,
    finalize_completion,
)
from core.errors import (
    EquipmentNotFound,
    InvalidDateRange,
    InvalidInput,
    InvalidState,
    MissingRequiredField,
    TooEarly,
)
from incidents.models import Incident
from insurance.models import InsurancePolicy
from payments.models import Payout

pytestmark = pytest.mark.django_db


def _current_window():
    today = timezone.localdate()
    return today, today + timedelta(days=2)


def test_create_booking_prices_and_confirms(renter_user, owner_user, equipment):
    booking = create_booking(
        renter=renter_user,
        equipment_id=equipment.pk,
        start_date="2024-01-01",
        end_date="2024-01-03",
        notes="Weekend shoot",
    )

    assert booking.status == Booking.Status.CONFIRMED
    assert booking.owner_id == owner_user.pk
    assert booking.start_date == date(2024, 1, 1)
    assert booking.base_price == 1_350_000
    assert booking.service_fee == 67_500
    assert booking.insurance_fee == 0
    assert booking.total_price == 1_417_500
    assert booking.notes == "Weekend shoot"


def test_create_booking_with_active_insurance(renter_user, equipment, insurance_policy):
    booking = create_booking(
        renter=renter_user,
        equipment_id=equipment.pk,
        start_date="2024-01-01",
        end_date="2024-01-03",
        insurance_id=insurance_policy.pk,
    )

    assert booking.insurance_id == insurance_policy.pk
    assert booking.insurance_fee == 90_000
    assert booking.insurance_snapshot["name"] == "Standard cover"
    assert booking.total_price == 1_350_000 + 67_500 + 90_000


def test_inactive_insurance_is_ignored(renter_user, equipment, insurance_policy):
    insurance_policy.status = InsurancePolicy.Status.INACTIVE
    insurance_policy.save(update_fields=["status"])

    booking = create_booking(
        renter=renter_user,
        equipment_id=equipment.pk,
        start_date="2024-01-01",
        end_date="2024-01-03",
        insurance_id=insurance_policy.pk,
    )

    assert booking.insurance_id is None
    assert booking.insurance_fee == 0


def test_create_booking_validation(renter_user, other_user, equipment):
    with pytest.raises(MissingRequiredField):
        create_booking(renter=renter_user, equipment_id=None, start_date="2024-01-01", end_date="2024-01-02")
    with pytest.raises(EquipmentNotFound):
        create_booking(renter=renter_user, equipment_id=999999, start_date="2024-01-01", end_date="2024-01-02")
    with pytest.raises(InvalidDateRange):
        create_booking(renter=renter_user, equipment_id=equipment.pk, start_date="2024-01-03", end_date="2024-01-01")
    with pytest.raises(InvalidInput):
        create_booking(
            renter=renter_user,
            equipment_id=equipment.pk,
            start_date="2024-01-01",
            end_date="2024-01-02",
            quantity=0,
        )
    with pytest.raises(InvalidInput):
        create_booking(
            renter=renter_user,
            equipment_id=equipment.pk,
            start_date="2024-01-01",
            end_date="2024-01-02",
            owner_id=other_user.pk,
        )
    assert Booking.objects.count() == 0


def test_check_in_moves_to_reviewing_and_records_incident(booking_factory):
    start, end = _current_window()
    booking = booking_factory(start_date=start, end_date=end, status=Booking.Status.ONGOING)
    original_total = booking.total_price

    result = check_in(
        booking.pk,
        images=["https://cdn.example.com/in-1.jpg"],
        notes="Small scratch on grip",
        incident={"description": "Scratch on grip", "estimated_charge": 200_000},
    )

    booking.refresh_from_db()
    assert booking.status == Booking.Status.REVIEWING
    assert booking.checkin_time is not None
    assert booking.checkin_images == ["https://cdn.example.com/in-1.jpg"]
    assert booking.notes == "Small scratch on grip"
    assert result.incident.type == Incident.Type.DAMAGE
    assert result.incident.severity == Incident.Severity.MINOR
    assert result.incident.resolution_amount is None
    assert result.incident.notes == "Estimated charge: 200000"
    assert booking.total_price == original_total


def test_check_in_issue_defaults_to_minor_severity(booking_factory):
    start, end = _current_window()
    booking = booking_factory(start_date=start, end_date=end, status=Booking.Status.ONGOING)

    result = check_in(booking.pk, incident={"type": "late", "description": "Pickup delayed"})

    assert result.incident.type == Incident.Type.LATE
    assert result.incident.severity == Incident.Severity.MINOR
    assert result.incident.notes == ""


def test_check_in_without_issue_creates_no_incident(booking_factory):
    start, end = _current_window()
    booking = booking_factory(start_date=start, end_date=end, status=Booking.Status.ONGOING)

    result = check_in(booking.pk, images=[])

    assert result.incident is None
    assert Incident.objects.count() == 0


def test_check_in_requires_ongoing(booking_factory):
    start, end = _current_window()
    booking = booking_factory(start_date=start, end_date=end, status=Booking.Status.CONFIRMED)

    with pytest.raises(InvalidState):
        check_in(booking.pk)


def test_clean_check_out_keeps_total(booking_factory):
    start, end = _current_window()
    booking = booking_factory(start_date=start, end_date=end, status=Booking.Status.REVIEWING)
    original_total = booking.total_price

    result = check_out(booking.pk, images=["https://cdn.example.com/out.jpg"], severity="none")

    booking.refresh_from_db()
    assert booking.status == Booking.Status.COMPLETED
    assert booking.total_price == original_total
    assert result.charges.total == 0
    assert result.incidents == []
    assert booking.notes == "Equipment returned"
    assert result.payout.amount == booking.base_price
    assert result.payout.owner_id == booking.owner_id
    assert Payout.objects.filter(booking=booking).count() == 1


def test_check_out_folds_damage_and_lateness(booking_factory):
    booking = booking_factory(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 3),
        status=Booking.Status.REVIEWING,
    )
    original_total = booking.total_price

    result = check_out(
        booking.pk,
        severity="major",
        issue_description="Cracked rear screen",
        late_minutes=90,
        late_reason="Traffic",
        notes="Returned by courier",
        now=booking.scheduled_end_at,
    )

    booking.refresh_from_db()
    assert result.charges.damage_charge == 38_000_000
    assert result.charges.late_charge == 37_500
    assert booking.total_price == original_total + 38_000_000 + 37_500
    assert booking.notes == "Returned by courier | Equipment returned • Traffic"

    damage, late = result.incidents
    assert damage.type == Incident.Type.DAMAGE
    assert damage.severity == "major"
    assert damage.resolution_amount == 38_000_000
    assert damage.description == "Cracked rear screen"
    assert late.type == Incident.Type.LATE
    assert late.severity == Incident.Severity.MINOR
    assert late.resolution_amount == 37_500
    assert late.description == "Late return: Traffic"

    assert result.payout.amount == booking.base_price
    assert result.payout.amount < booking.total_price
    assert Payout.objects.filter(booking=booking).count() == 1


def test_check_out_uses_wall_clock_lateness(booking_factory):
    booking = booking_factory(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 3),
        status=Booking.Status.REVIEWING,
    )

    result = check_out(
        booking.pk,
        late_minutes=0,
        now=booking.scheduled_end_at + timedelta(minutes=61),
    )

    assert result.charges.late_minutes == 61
    assert result.charges.late_charge == 37_500
    assert result.incidents[0].description == "Returned 2 hour(s) late"


def test_check_out_twice_applies_charges_once(booking_factory):
    start, end = _current_window()
    booking = booking_factory(start_date=start, end_date=end, status=Booking.Status.REVIEWING)

    check_out(booking.pk, severity="minor")
    booking.refresh_from_db()
    charged_total = booking.total_price

    with pytest.raises(InvalidState):
        check_out(booking.pk, severity="minor")

    booking.refresh_from_db()
    assert booking.total_price == charged_total
    assert Incident.objects.filter(booking=booking).count() == 1


def test_check_out_requires_reviewing(booking_factory):
    start, end = _current_window()
    booking = booking_factory(start_date=start, end_date=end, status=Booking.Status.ONGOING)

    with pytest.raises(InvalidState):
        check_out(booking.pk)


def test_finalize_completion_creates_single_payout(booking_factory):
    booking = booking_factory(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 3),
        status=Booking.Status.ONGOING,
    )

    result = finalize_completion(booking.pk)

    assert result.booking.status == Booking.Status.COMPLETED
    assert result.payout_created is True
    assert result.payout.amount == booking.base_price
    assert result.payout.owner_id == booking.owner_id
    assert result.payout.status == Payout.Status.PENDING

    with pytest.raises(InvalidState):
        finalize_completion(booking.pk)
    assert Payout.objects.filter(booking=booking).count() == 1


def test_finalize_before_end_is_too_early(booking_factory):
    start, end = _current_window()
    booking = booking_factory(start_date=start, end_date=end, status=Booking.Status.ONGOING)

    with pytest.raises(TooEarly):
        finalize_completion(booking.pk)
    booking.refresh_from_db()
    assert booking.status == Booking.Status.ONGOING


def test_payment_driven_transitions_only_touch_awaiting_bookings(booking_factory):
    start, end = _current_window()
    awaiting = booking_factory(start_date=start, end_date=end, status=Booking.Status.CONFIRMED)
    reviewing = booking_factory(start_date=start, end_date=end, status=Booking.Status.REVIEWING)

    assert activate_after_payment(awaiting.pk) is True
    assert activate_after_payment(awaiting.pk) is False
    assert fail_unpaid_booking(reviewing.pk) is False

    awaiting.refresh_from_db()
    reviewing.refresh_from_db()
    assert awaiting.status == Booking.Status.ONGOING
    assert reviewing.status == Booking.Status.REVIEWING
