import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

ITEM_TYPE_CHOICES = [
    ("property", "Property"),
    ("service", "Service"),
    ("leisure", "Leisure activity"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("item_type", models.CharField(choices=ITEM_TYPE_CHOICES, max_length=20)),
                ("item_id", models.PositiveBigIntegerField()),
                ("date", models.DateField()),
                ("guests", models.PositiveIntegerField(default=1)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("cancelled", "Cancelled")],
                        default="pending",
                        max_length=12,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(choices=[("unpaid", "Unpaid"), ("paid", "Paid")], default="unpaid", max_length=12),
                ),
                ("payment_intent_id", models.CharField(blank=True, max_length=255, null=True, unique=True)),
                ("total_amount", models.DecimalField(decimal_places=3, default=0, max_digits=14)),
                ("currency", models.CharField(default="GBP", max_length=3)),
                ("special_requests", models.TextField(blank=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
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
                "ordering": ["date", "id"],
                "indexes": [
                    models.Index(fields=["item_type", "item_id", "date"], name="booking_item_day_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationLock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("item_type", models.CharField(choices=ITEM_TYPE_CHOICES, max_length=20)),
                ("item_id", models.PositiveBigIntegerField()),
                ("date", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("item_type", "item_id", "date"),
                        name="unique_reservation_lock_day",
                    )
                ],
            },
        ),
    ]
