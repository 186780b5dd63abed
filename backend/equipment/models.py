from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Equipment(models.Model):
    """A rentable equipment item listed by an owner."""

    class Category(models.TextChoices):
        CAMERA = "camera", "Camera"
        LENS = "lens", "Lens"
        LIGHTING = "lighting", "Lighting"
        AUDIO = "audio", "Audio"
        ACCESSORY = "accessory", "Accessory"

    class Status(models.TextChoices):
        AVAILABLE = "available", "available"
        UNAVAILABLE = "unavailable", "unavailable"

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="equipment",
    )
    title = models.CharField(max_length=100)
    brand = models.CharField(max_length=80, blank=True, default="")
    description = models.TextField(blank=True)
    category = models.CharField(max_length=16, choices=Category.choices)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    # Money is stored in minor currency units.
    price_per_day = models.PositiveBigIntegerField(default=0)
    replacement_price = models.PositiveBigIntegerField(default=0)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "equipment"

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk})"
