from __future__ import annotations

import pytest
from django.utils import timezone

from core.errors import (
    BookingNotFound,
    IncidentNotFound,
    InvalidInput,
    InvalidState,
    MissingRequiredField,
)
from incidents.models import Incident
from incidents.services import (
    incidents_for_booking,
    record_incident,
    report_incident,
    resolve_incident,
)

pytestmark = pytest.mark.django_db


@pytest.fixture
def booking(booking_factory):
    today = timezone.localdate()
    return booking_factory(start_date=today, end_date=today)


def test_question_needs_no_booking(renter_user, booking):
    incident = record_incident(
        reporter=renter_user,
        type=Incident.Type.QUESTION,
        description="How do I extend my rental?",
        booking=booking,
        severity="major",
    )

    assert incident.booking is None
    assert incident.severity is None
    assert incident.status == Incident.Status.PENDING


def test_non_question_requires_booking_and_severity(renter_user, booking):
    with pytest.raises(MissingRequiredField):
        record_incident(reporter=renter_user, type="damage", description="Dent", severity="minor")
    with pytest.raises(MissingRequiredField):
        record_incident(reporter=renter_user, type="damage", description="Dent", booking=booking)
    with pytest.raises(InvalidInput):
        record_incident(
            reporter=renter_user,
            type="damage",
            description="Dent",
            booking=booking,
            severity="apocalyptic",
        )
    with pytest.raises(MissingRequiredField):
        record_incident(
            reporter=renter_user, type="damage", description="  ", booking=booking, severity="minor"
        )


def test_report_checks_participation(renter_user, other_user, booking):
    incident = report_incident(
        reporter=renter_user,
        type="theft",
        description="Bag stolen from car",
        booking_id=booking.pk,
        severity="critical",
    )
    assert incident.booking_id == booking.pk

    with pytest.raises(BookingNotFound):
        report_incident(
            reporter=other_user,
            type="damage",
            description="Not mine",
            booking_id=booking.pk,
            severity="minor",
        )


def test_resolve_is_idempotent(staff_user, renter_user, booking):
    incident = record_incident(
        reporter=renter_user,
        type="damage",
        description="Dent",
        booking=booking,
        severity="minor",
        resolution_amount=100_000,
    )

    resolved = resolve_incident(
        incident.pk, status="resolved", resolution_notes="Charged deposit", resolved_by=staff_user
    )
    again = resolve_incident(incident.pk, status="resolved", resolution_notes="ignored")

    assert resolved.status == Incident.Status.RESOLVED
    assert resolved.resolved_by == staff_user
    assert resolved.resolved_at is not None
    assert again.notes == "Charged deposit"

    with pytest.raises(InvalidState):
        resolve_incident(incident.pk, status="rejected")


def test_resolve_validation():
    with pytest.raises(InvalidInput):
        resolve_incident(1, status="pending")
    with pytest.raises(IncidentNotFound):
        resolve_incident(424242, status="resolved")


def test_incidents_for_booking_in_creation_order(renter_user, booking):
    first = record_incident(
        reporter=renter_user, type="damage", description="One", booking=booking, severity="minor"
    )
    second = record_incident(
        reporter=renter_user, type="late", description="Two", booking=booking, severity="minor"
    )

    assert list(incidents_for_booking(booking.pk)) == [first, second]
