"""Booking lifecycle operations: creation, handover events and completion."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from django.db import transaction
from django.utils import timezone

from core.errors import InvalidInput, MissingRequiredField
from equipment.services import get_equipment
from incidents.models import Incident
from incidents.services import record_incident
from insurance.services import get_active_policy
from payments.models import Payout
from payments.payouts import ensure_payout

from .domain import (
    ACTIVATE_FROM,
    CHECK_IN_FROM,
    CHECK_OUT_FROM,
    EXPIRE_FROM,
    FINALIZE_FROM,
    append_note,
    apply_transition,
    assert_can_check_in,
    assert_can_check_out,
    assert_can_finalize,
    lock_booking,
)
from .models import Booking
from .pricing import (
    SEVERITY_NONE,
    ExtraCharges,
    compute_booking_price,
    compute_extra_charges,
    effective_late_minutes,
    parse_booking_date,
)

logger = logging.getLogger(__name__)

RETURN_SUMMARY = "Equipment returned"
CHECKIN_INCIDENT_DESCRIPTION = "Issue reported during equipment handover"
DAMAGE_INCIDENT_DESCRIPTION = "Damage recorded when the equipment was returned"
REPLACEMENT_PRICE_FALLBACK_DAYS = 10


@dataclass
class CheckInResult:
    booking: Booking
    incident: Optional[Incident] = None


@dataclass
class CheckOutResult:
    booking: Booking
    charges: ExtraCharges
    incidents: list[Incident] = field(default_factory=list)
    payout: Optional[Payout] = None


@dataclass
class CompletionResult:
    booking: Booking
    payout: Payout
    payout_created: bool


def _parse_quantity(value: Any) -> int:
    if value in (None, ""):
        return 1
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise InvalidInput("quantity must be an integer.", field="quantity") from None
    if quantity < 1:
        raise InvalidInput("quantity must be at least 1.", field="quantity")
    return quantity


def _estimate_note(amount) -> str:
    if amount in (None, ""):
        return ""
    return f"Estimated charge: {int(amount)}"


def create_booking(
    *,
    renter,
    equipment_id,
    start_date,
    end_date,
    quantity: Any = 1,
    owner_id=None,
    insurance_id=None,
    notes: Optional[str] = None,
) -> Booking:
    """
    Price and persist a rental request.

    Valid requests are confirmed immediately; the owner is taken from the
    equipment and never re-derived afterwards.
    """
    for name, value in (
        ("equipment_id", equipment_id),
        ("start_date", start_date),
        ("end_date", end_date),
    ):
        if value in (None, ""):
            raise MissingRequiredField(f"{name} is required.", field=name)
    if renter is None:
        raise MissingRequiredField("renter is required.", field="renter")

    equipment = get_equipment(equipment_id)
    quantity = _parse_quantity(quantity)

    if owner_id not in (None, "") and str(owner_id) != str(equipment.owner_id):
        raise InvalidInput("owner does not match the equipment owner.", field="owner")

    policy = get_active_policy(insurance_id)
    price = compute_booking_price(
        price_per_day=equipment.price_per_day,
        quantity=quantity,
        start_date=start_date,
        end_date=end_date,
        insurance_policy=policy,
    )

    booking = Booking.objects.create(
        equipment=equipment,
        owner_id=equipment.owner_id,
        renter=renter,
        insurance=policy,
        insurance_snapshot=(
            {
                "name": policy.name,
                "min_coverage": policy.min_coverage,
                "max_coverage": policy.max_coverage,
            }
            if policy
            else {}
        ),
        quantity=quantity,
        start_date=parse_booking_date(start_date, "start_date"),
        end_date=parse_booking_date(end_date, "end_date"),
        base_price=price.base_price,
        service_fee=price.service_fee,
        insurance_fee=price.insurance_fee,
        discount=0,
        total_price=price.total_price,
        status=Booking.Status.CONFIRMED,
        notes=(notes or "").strip(),
    )
    logger.info(
        "booking %s created: %s day(s), total %s",
        booking.pk,
        price.total_days,
        booking.total_price,
        extra={"booking_id": booking.pk},
    )
    return booking


def check_in(
    booking_id,
    *,
    images: Optional[Sequence[str]] = None,
    notes: Optional[str] = None,
    incident: Optional[dict] = None,
) -> CheckInResult:
    """
    Record the handover to the renter (ongoing -> reviewing).

    A reported issue without a type is filed as damage, and one without a
    severity as minor. Both defaults are intended. The renter's estimated
    charge goes into the incident notes only. Nothing is billed at check-in,
    so resolution_amount stays empty.
    """
    with transaction.atomic():
        booking = lock_booking(booking_id)
        assert_can_check_in(booking)

        images = list(images or [])
        apply_transition(
            booking,
            allowed_from=CHECK_IN_FROM,
            to=Booking.Status.REVIEWING,
            checkin_time=timezone.now(),
            checkin_images=images or booking.checkin_images,
            notes=append_note(booking.notes, notes),
        )

        created_incident = None
        incident = incident or {}
        if incident.get("description") or incident.get("severity"):
            created_incident = record_incident(
                booking=booking,
                reporter=booking.renter,
                type=incident.get("type") or Incident.Type.DAMAGE,
                severity=incident.get("severity") or Incident.Severity.MINOR,
                description=incident.get("description") or CHECKIN_INCIDENT_DESCRIPTION,
                notes=_estimate_note(incident.get("estimated_charge")),
            )

    return CheckInResult(booking=booking, incident=created_incident)


def check_out(
    booking_id,
    *,
    images: Optional[Sequence[str]] = None,
    notes: Optional[str] = None,
    severity: Optional[str] = SEVERITY_NONE,
    issue_description: Optional[str] = None,
    late_minutes: Optional[int] = 0,
    late_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CheckOutResult:
    """
    Record the return (reviewing -> completed) and fold extra charges into
    the total.

    Damage and lateness each produce their own incident carrying the exact
    amount added to total_price. Completion does not wait for incidents to
    be resolved.
    """
    now = now or timezone.now()
    severity = severity or SEVERITY_NONE

    with transaction.atomic():
        booking = lock_booking(booking_id)
        assert_can_check_out(booking)

        equipment = get_equipment(booking.equipment_id)
        replacement_price = equipment.replacement_price or (
            equipment.price_per_day * REPLACEMENT_PRICE_FALLBACK_DAYS
        )
        charges = compute_extra_charges(
            replacement_price=replacement_price,
            price_per_day=equipment.price_per_day,
            quantity=booking.quantity,
            severity=severity,
            late_minutes=effective_late_minutes(late_minutes, booking.scheduled_end_at, now),
        )

        updated_notes = append_note(booking.notes, notes)
        summary = " • ".join(part for part in (RETURN_SUMMARY, (late_reason or "").strip()) if part)
        updated_notes = append_note(updated_notes, summary)

        images = list(images or [])
        apply_transition(
            booking,
            allowed_from=CHECK_OUT_FROM,
            to=Booking.Status.COMPLETED,
            checkout_time=now,
            checkout_images=images or booking.checkout_images,
            total_price=booking.total_price + charges.total,
            notes=updated_notes,
        )

        incidents: list[Incident] = []
        if severity != SEVERITY_NONE:
            incidents.append(
                record_incident(
                    booking=booking,
                    reporter=booking.renter,
                    type=Incident.Type.DAMAGE,
                    severity=severity,
                    description=issue_description or DAMAGE_INCIDENT_DESCRIPTION,
                    resolution_amount=charges.damage_charge,
                    notes=notes,
                )
            )
        if charges.late_minutes > 0:
            late_hours = -(-charges.late_minutes // 60)
            incidents.append(
                record_incident(
                    booking=booking,
                    reporter=booking.renter,
                    type=Incident.Type.LATE,
                    severity=Incident.Severity.MINOR,
                    description=(
                        f"Late return: {late_reason.strip()}"
                        if (late_reason or "").strip()
                        else f"Returned {late_hours} hour(s) late"
                    ),
                    resolution_amount=charges.late_charge,
                )
            )

        payout, _ = ensure_payout(booking)

    return CheckOutResult(booking=booking, charges=charges, incidents=incidents, payout=payout)


def finalize_completion(booking_id, *, now: Optional[datetime] = None) -> CompletionResult:
    """Complete an ongoing booking once its rental window has closed."""
    now = now or timezone.now()
    with transaction.atomic():
        booking = lock_booking(booking_id)
        assert_can_finalize(booking, now=now)
        apply_transition(booking, allowed_from=FINALIZE_FROM, to=Booking.Status.COMPLETED)
        payout, created = ensure_payout(booking)
    return CompletionResult(booking=booking, payout=payout, payout_created=created)


def activate_after_payment(booking_id) -> bool:
    """Payment confirmed: move an awaiting booking to ongoing. No-op otherwise."""
    updated = Booking.objects.filter(pk=booking_id, status__in=ACTIVATE_FROM).update(
        status=Booking.Status.ONGOING,
        updated_at=timezone.now(),
    )
    if updated:
        logger.info("booking %s activated by payment", booking_id, extra={"booking_id": booking_id})
    return bool(updated)


def fail_unpaid_booking(booking_id) -> bool:
    """Payment expired: fail a booking still awaiting payment. No-op otherwise."""
    updated = Booking.objects.filter(pk=booking_id, status__in=EXPIRE_FROM).update(
        status=Booking.Status.FAILED,
        updated_at=timezone.now(),
    )
    if updated:
        logger.info("booking %s failed: payment expired", booking_id, extra={"booking_id": booking_id})
    return bool(updated)
