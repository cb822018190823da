from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ParkingSpot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("spot_number", models.CharField(max_length=20, unique=True)),
                ("description", models.TextField(blank=True)),
                (
                    "spot_type",
                    models.CharField(
                        choices=[
                            ("compact", "Compact"),
                            ("regular", "Regular"),
                            ("large", "Large"),
                            ("ev_charging", "EV charging"),
                            ("handicap", "Handicap"),
                        ],
                        default="regular",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("available", "Available"),
                            ("occupied", "Occupied"),
                            ("reserved", "Reserved"),
                            ("maintenance", "Maintenance"),
                        ],
                        default="available",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Parking spot",
                "verbose_name_plural": "Parking spots",
                "ordering": ["spot_number"],
                "indexes": [models.Index(fields=["status"], name="parking_spot_status_idx")],
            },
        ),
    ]
