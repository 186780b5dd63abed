import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Incident",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("damage", "damage"),
                            ("theft", "theft"),
                            ("late", "late"),
                            ("other", "other"),
                            ("question", "question"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "severity",
                    models.CharField(
                        blank=True,
                        choices=[("minor", "minor"), ("major", "major"), ("critical", "critical")],
                        max_length=16,
                        null=True,
                    ),
                ),
                ("description", models.CharField(max_length=1000)),
                ("images", models.JSONField(blank=True, default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "pending"), ("resolved", "resolved"), ("rejected", "rejected")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "resolution_amount",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="Amount charged as a consequence, in minor currency units.",
                        null=True,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "booking",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="incidents",
                        to="bookings.booking",
                    ),
                ),
                (
                    "reporter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="incidents_reported",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "resolved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="incidents_resolved",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["booking", "status"], name="incident_booking_status_idx"),
                    models.Index(fields=["reporter"], name="incident_reporter_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("type", "question"),
                            models.Q(("booking__isnull", False), ("severity__isnull", False)),
                            _connector="OR",
                        ),
                        name="incident_booking_fields_required",
                    ),
                ],
            },
        ),
    ]
