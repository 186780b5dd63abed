from django.conf import settings
from django.db import models
from django.db.models import Q


class Payment(models.Model):
    """Local mirror of a bank-transfer payment intent held by the gateway."""

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        PAID = "paid", "paid"
        COMPLETED = "completed", "completed"
        FAILED = "failed", "failed"

    class Method(models.TextChoices):
        BANK_TRANSFER = "bank_transfer", "Bank transfer"

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    renter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments_made",
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments_received",
    )
    amount = models.PositiveBigIntegerField(help_text="Amount in minor currency units.")
    content = models.CharField(
        max_length=255,
        help_text="Bank-transfer memo the gateway matches incoming transfers on.",
    )
    ref = models.CharField(max_length=64, help_text="Idempotency key sent to the gateway.")
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    method = models.CharField(
        max_length=32,
        choices=Method.choices,
        default=Method.BANK_TRANSFER,
    )
    external_txn_id = models.CharField(max_length=255, blank=True, default="")
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="payment_status_created_idx"),
            models.Index(fields=["ref"], name="payment_ref_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=~Q(status="failed"),
                name="payment_one_live_per_booking",
            ),
        ]

    def __str__(self) -> str:
        return f"Payment #{self.pk} booking {self.booking_id} {self.amount} ({self.status})"

    def is_settled(self) -> bool:
        return self.status in {self.Status.PAID, self.Status.COMPLETED}


class Payout(models.Model):
    """Money owed to an owner for a completed booking."""

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        COMPLETED = "completed", "completed"
        FAILED = "failed", "failed"

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payouts",
    )
    booking = models.OneToOneField(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payout",
    )
    incident = models.ForeignKey(
        "incidents.Incident",
        on_delete=models.SET_NULL,
        related_name="payouts",
        null=True,
        blank=True,
    )
    amount = models.PositiveBigIntegerField(help_text="Base rental price only.")
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    notes = models.CharField(max_length=500, blank=True, default="")
    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "status"], name="payout_owner_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Payout #{self.pk} to {self.owner_id} for booking {self.booking_id} ({self.status})"
