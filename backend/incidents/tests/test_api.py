from __future__ import annotations

import pytest
from django.utils import timezone

from incidents.models import Incident
from incidents.services import record_incident

pytestmark = pytest.mark.django_db


@pytest.fixture
def booking(booking_factory):
    today = timezone.localdate()
    return booking_factory(start_date=today, end_date=today)


def test_report_question(api_client, other_user):
    api_client.force_authenticate(other_user)

    response = api_client.post(
        "/api/incidents/",
        {"type": "question", "description": "Do you deliver to Da Nang?"},
        format="json",
    )

    assert response.status_code == 201, response.data
    assert response.data["data"]["booking"] is None


def test_report_damage_requires_severity(api_client, renter_user, booking):
    api_client.force_authenticate(renter_user)

    response = api_client.post(
        "/api/incidents/",
        {"type": "damage", "description": "Lens cap missing", "booking_id": booking.pk},
        format="json",
    )

    assert response.status_code == 400
    assert response.data["code"] == "missing_required_field"


def test_users_see_only_their_reports_and_staff_see_all(
    api_client, renter_user, other_user, staff_user, booking
):
    record_incident(
        reporter=renter_user, type="damage", description="Dent", booking=booking, severity="minor"
    )
    record_incident(reporter=other_user, type="question", description="Hours?")

    api_client.force_authenticate(renter_user)
    assert len(api_client.get("/api/incidents/").data) == 1

    api_client.force_authenticate(staff_user)
    everything = api_client.get("/api/incidents/")
    questions = api_client.get("/api/incidents/", {"type": "question"})
    assert len(everything.data) == 2
    assert len(questions.data) == 1


def test_only_staff_resolve(api_client, renter_user, staff_user, booking):
    incident = record_incident(
        reporter=renter_user, type="damage", description="Dent", booking=booking, severity="minor"
    )
    url = f"/api/incidents/{incident.pk}/resolve/"

    api_client.force_authenticate(renter_user)
    assert api_client.post(url, {"status": "resolved"}, format="json").status_code == 403

    api_client.force_authenticate(staff_user)
    response = api_client.post(url, {"status": "rejected", "notes": "Pre-existing"}, format="json")
    assert response.status_code == 200
    assert response.data["data"]["status"] == Incident.Status.REJECTED
    assert response.data["data"]["notes"] == "Pre-existing"
