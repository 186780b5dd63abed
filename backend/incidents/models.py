"""Incidents recorded against bookings."""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q


class Incident(models.Model):
    """An anomaly reported during or after a rental, or a standalone question."""

    class Type(models.TextChoices):
        DAMAGE = "damage", "damage"
        THEFT = "theft", "theft"
        LATE = "late", "late"
        OTHER = "other", "other"
        QUESTION = "question", "question"

    class Severity(models.TextChoices):
        MINOR = "minor", "minor"
        MAJOR = "major", "major"
        CRITICAL = "critical", "critical"

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        RESOLVED = "resolved", "resolved"
        REJECTED = "rejected", "rejected"

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="incidents",
        null=True,
        blank=True,
    )
    reporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="incidents_reported",
    )
    type = models.CharField(max_length=16, choices=Type.choices)
    severity = models.CharField(
        max_length=16,
        choices=Severity.choices,
        null=True,
        blank=True,
    )
    description = models.CharField(max_length=1000)
    images = models.JSONField(default=list, blank=True)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    resolution_amount = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Amount charged as a consequence, in minor currency units.",
    )
    notes = models.TextField(blank=True, default="")
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="incidents_resolved",
        null=True,
        blank=True,
    )
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["booking", "status"], name="incident_booking_status_idx"),
            models.Index(fields=["reporter"], name="incident_reporter_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(type="question")
                | (Q(booking__isnull=False) & Q(severity__isnull=False)),
                name="incident_booking_fields_required",
            ),
        ]

    def __str__(self) -> str:
        return f"Incident #{self.pk} {self.type} booking {self.booking_id} ({self.status})"

    def is_closed(self) -> bool:
        return self.status in {self.Status.RESOLVED, self.Status.REJECTED}
