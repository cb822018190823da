from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("parking", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending approval"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("active", "Checked in"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("expired", "Expired"),
                            ("no_show", "No show"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("expected_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("ticket_number", models.CharField(blank=True, max_length=40, null=True, unique=True)),
                ("actual_check_in_time", models.DateTimeField(blank=True, null=True)),
                ("actual_check_out_time", models.DateTimeField(blank=True, null=True)),
                ("actual_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                (
                    "payment_id",
                    models.CharField(
                        blank=True, help_text="Reference of the external payment, if any.", max_length=255
                    ),
                ),
                ("cancellation_reason", models.CharField(blank=True, max_length=255)),
                (
                    "cancelled_by",
                    models.CharField(
                        blank=True,
                        choices=[("user", "User"), ("admin", "Admin"), ("system", "System")],
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "spot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to="parking.parkingspot",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["spot", "start_time", "end_time"], name="booking_spot_window_idx"),
                    models.Index(fields=["status"], name="booking_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(end_time__gt=models.F("start_time")),
                        name="booking_end_after_start",
                    )
                ],
            },
        ),
    ]
