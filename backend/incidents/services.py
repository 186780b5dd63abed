"""Creation and resolution of incidents."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from bookings.domain import append_note
from bookings.models import Booking
from core.errors import (
    BookingNotFound,
    IncidentNotFound,
    InvalidInput,
    InvalidState,
    MissingRequiredField,
)

from .models import Incident

logger = logging.getLogger(__name__)

CLOSING_STATUSES = (Incident.Status.RESOLVED, Incident.Status.REJECTED)


def record_incident(
    *,
    reporter,
    type: str,
    description: str,
    booking: Optional[Booking] = None,
    severity: Optional[str] = None,
    images: Optional[Sequence[str]] = None,
    resolution_amount: Optional[int] = None,
    notes: Optional[str] = None,
) -> Incident:
    """
    Create a pending incident.

    Questions stand alone: any booking or severity passed with one is
    dropped. Every other type needs both.
    """
    if reporter is None:
        raise MissingRequiredField("reporter is required.", field="reporter")
    if not type:
        raise MissingRequiredField("type is required.", field="type")
    if type not in Incident.Type.values:
        raise InvalidInput(f"Unknown incident type '{type}'.", field="type")
    description = (description or "").strip()
    if not description:
        raise MissingRequiredField("description is required.", field="description")

    if type == Incident.Type.QUESTION:
        booking = None
        severity = None
    else:
        if booking is None:
            raise MissingRequiredField(
                "Booking is required for incident reports.", field="booking"
            )
        if not severity:
            raise MissingRequiredField(
                "Severity is required for incident reports.", field="severity"
            )
        if severity not in Incident.Severity.values:
            raise InvalidInput(f"Unknown severity '{severity}'.", field="severity")

    if resolution_amount is not None and int(resolution_amount) < 0:
        raise InvalidInput("resolution_amount cannot be negative.", field="resolution_amount")

    incident = Incident.objects.create(
        booking=booking,
        reporter=reporter,
        type=type,
        severity=severity,
        description=description[:1000],
        images=list(images or []),
        resolution_amount=resolution_amount,
        notes=(notes or "").strip(),
        status=Incident.Status.PENDING,
    )
    logger.info(
        "incident %s recorded (%s/%s)",
        incident.pk,
        incident.type,
        incident.severity,
        extra={"booking_id": getattr(booking, "pk", None)},
    )
    return incident


def report_incident(
    *,
    reporter,
    type: str,
    description: str,
    booking_id=None,
    severity: Optional[str] = None,
    images: Optional[Sequence[str]] = None,
) -> Incident:
    """Ad hoc report from a booking participant (or a free-standing question)."""
    booking = None
    if type != Incident.Type.QUESTION and booking_id:
        booking = _participant_booking(booking_id, reporter)
        if booking is None:
            raise BookingNotFound(booking_id=str(booking_id))
    return record_incident(
        reporter=reporter,
        type=type,
        description=description,
        booking=booking,
        severity=severity,
        images=images,
    )


def _participant_booking(booking_id, user) -> Optional[Booking]:
    try:
        booking = Booking.objects.get(pk=booking_id)
    except (Booking.DoesNotExist, TypeError, ValueError):
        return None
    if user.is_staff or user.pk in (booking.owner_id, booking.renter_id):
        return booking
    return None


def resolve_incident(
    incident_id,
    *,
    status: str,
    resolution_notes: Optional[str] = None,
    resolved_by=None,
) -> Incident:
    """
    Close an incident as resolved or rejected.

    Repeating the same decision returns the incident unchanged; a closed
    incident cannot be moved to the other outcome.
    """
    if status not in CLOSING_STATUSES:
        raise InvalidInput("status must be 'resolved' or 'rejected'.", field="status")

    with transaction.atomic():
        try:
            incident = Incident.objects.select_for_update().get(pk=incident_id)
        except (Incident.DoesNotExist, TypeError, ValueError):
            raise IncidentNotFound(incident_id=str(incident_id)) from None

        if incident.status == status:
            return incident
        if incident.is_closed():
            raise InvalidState(
                "Incident has already been closed.",
                status=incident.status,
            )

        incident.status = status
        incident.notes = append_note(incident.notes, resolution_notes)
        incident.resolved_by = resolved_by
        incident.resolved_at = timezone.now()
        incident.save(
            update_fields=["status", "notes", "resolved_by", "resolved_at", "updated_at"]
        )

    logger.info("incident %s closed as %s", incident.pk, status)
    return incident


def incidents_for_booking(booking_id) -> QuerySet[Incident]:
    return Incident.objects.filter(booking_id=booking_id).order_by("created_at", "id")
