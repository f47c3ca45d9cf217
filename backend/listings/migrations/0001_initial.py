import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _item_fields(related_name):
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("title", models.CharField(max_length=200)),
        ("description", models.TextField(blank=True)),
        (
            "max_guests",
            models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
        ),
        ("price", models.DecimalField(decimal_places=3, max_digits=14)),
        ("currency", models.CharField(default="GBP", max_length=3)),
        ("is_active", models.BooleanField(default=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        (
            "owner",
            models.ForeignKey(
                on_delete=django.db.models.deletion.CASCADE,
                related_name=related_name,
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Property",
            fields=_item_fields("property_listings")
            + [
                ("address", models.CharField(blank=True, max_length=255)),
                ("cleaning_fee", models.DecimalField(blank=True, decimal_places=3, max_digits=14, null=True)),
            ],
            options={
                "ordering": ["title", "id"],
                "abstract": False,
                "verbose_name_plural": "properties",
            },
        ),
        migrations.CreateModel(
            name="Service",
            fields=_item_fields("service_listings"),
            options={
                "ordering": ["title", "id"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="LeisureActivity",
            fields=_item_fields("leisureactivity_listings"),
            options={
                "ordering": ["title", "id"],
                "abstract": False,
                "verbose_name_plural": "leisure activities",
            },
        ),
    ]
