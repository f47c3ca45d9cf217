from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ProcessedWebhookEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_id", models.CharField(max_length=255, unique=True)),
                ("event_type", models.CharField(max_length=100)),
                (
                    "outcome",
                    models.CharField(
                        choices=[("applied", "Applied"), ("unmatched", "Unmatched")],
                        default="applied",
                        max_length=20,
                    ),
                ),
                ("object_id", models.CharField(blank=True, max_length=255)),
                ("payload_sha256", models.CharField(max_length=64)),
                ("processed_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-processed_at"],
            },
        ),
    ]
