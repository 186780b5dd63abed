from django.db import models


class InsurancePolicy(models.Model):
    """Insurance product a renter can attach to a booking."""

    class Status(models.TextChoices):
        ACTIVE = "active", "active"
        INACTIVE = "inactive", "inactive"

    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True, default="")
    min_coverage = models.PositiveBigIntegerField()
    max_coverage = models.PositiveBigIntegerField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["min_coverage", "id"]
        verbose_name_plural = "insurance policies"

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE
