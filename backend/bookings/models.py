"""Database models for rental bookings."""

from __future__ import annotations

from datetime import datetime, time, timedelta

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class Booking(models.Model):
    """One rental agreement between a renter and an equipment owner."""

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        CONFIRMED = "confirmed", "confirmed"
        ONGOING = "ongoing", "ongoing"
        REVIEWING = "reviewing", "reviewing"
        COMPLETED = "completed", "completed"
        CANCELED = "canceled", "canceled"
        FAILED = "failed", "failed"

    equipment = models.ForeignKey(
        "equipment.Equipment",
        related_name="bookings",
        on_delete=models.PROTECT,
    )
    # Owner is copied from the equipment when the booking is created.
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="bookings_as_owner",
        on_delete=models.PROTECT,
    )
    renter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="bookings_as_renter",
        on_delete=models.PROTECT,
    )
    insurance = models.ForeignKey(
        "insurance.InsurancePolicy",
        related_name="bookings",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
    )
    insurance_snapshot = models.JSONField(default=dict, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    start_date = models.DateField()
    end_date = models.DateField(help_text="Last rental day (inclusive).")

    # Money is stored in minor currency units.
    base_price = models.PositiveBigIntegerField(default=0)
    service_fee = models.PositiveBigIntegerField(default=0)
    insurance_fee = models.PositiveBigIntegerField(default=0)
    discount = models.PositiveBigIntegerField(default=0)
    total_price = models.PositiveBigIntegerField(default=0)

    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    checkin_time = models.DateTimeField(null=True, blank=True)
    checkin_images = models.JSONField(default=list, blank=True)
    checkout_time = models.DateTimeField(null=True, blank=True)
    checkout_images = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["equipment", "start_date", "end_date"], name="booking_equipment_dates_idx"),
            models.Index(fields=["renter", "status"], name="booking_renter_status_idx"),
            models.Index(fields=["owner", "status"], name="booking_owner_status_idx"),
            models.Index(fields=["status", "start_date"], name="booking_status_start_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="booking_end_on_or_after_start",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name="booking_quantity_positive",
            ),
            models.CheckConstraint(
                condition=Q(total_price__gte=F("base_price")),
                name="booking_total_covers_base",
            ),
        ]

    def __str__(self) -> str:
        """Return a human-readable representation."""
        return f"Booking #{self.pk} for {self.equipment_id} ({self.status})"

    @property
    def days(self) -> int:
        """Return the count of booked days, both ends inclusive."""
        if not self.start_date or not self.end_date:
            return 0
        return (self.end_date - self.start_date).days + 1

    @property
    def scheduled_end_at(self) -> datetime | None:
        """The instant the rental window closes: midnight after end_date."""
        if not self.end_date:
            return None
        return timezone.make_aware(datetime.combine(self.end_date + timedelta(days=1), time.min))

    def is_terminal(self) -> bool:
        """Return True if the booking reached a terminal state."""
        return self.status in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {
        Booking.Status.COMPLETED,
        Booking.Status.CANCELED,
        Booking.Status.FAILED,
    }
)
