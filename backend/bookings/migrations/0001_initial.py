import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("equipment", "0001_initial"),
        ("insurance", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("insurance_snapshot", models.JSONField(blank=True, default=dict)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(help_text="Last rental day (inclusive).")),
                ("base_price", models.PositiveBigIntegerField(default=0)),
                ("service_fee", models.PositiveBigIntegerField(default=0)),
                ("insurance_fee", models.PositiveBigIntegerField(default=0)),
                ("discount", models.PositiveBigIntegerField(default=0)),
                ("total_price", models.PositiveBigIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "pending"),
                            ("confirmed", "confirmed"),
                            ("ongoing", "ongoing"),
                            ("reviewing", "reviewing"),
                            ("completed", "completed"),
                            ("canceled", "canceled"),
                            ("failed", "failed"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("checkin_time", models.DateTimeField(blank=True, null=True)),
                ("checkin_images", models.JSONField(blank=True, default=list)),
                ("checkout_time", models.DateTimeField(blank=True, null=True)),
                ("checkout_images", models.JSONField(blank=True, default=list)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "equipment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="equipment.equipment",
                    ),
                ),
                (
                    "insurance",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="insurance.insurancepolicy",
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings_as_owner",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "renter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings_as_renter",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["equipment", "start_date", "end_date"], name="booking_equipment_dates_idx"),
                    models.Index(fields=["renter", "status"], name="booking_renter_status_idx"),
                    models.Index(fields=["owner", "status"], name="booking_owner_status_idx"),
                    models.Index(fields=["status", "start_date"], name="booking_status_start_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="booking_end_on_or_after_start",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 1)),
                        name="booking_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("total_price__gte", models.F("base_price"))),
                        name="booking_total_covers_base",
                    ),
                ],
            },
        ),
    ]
