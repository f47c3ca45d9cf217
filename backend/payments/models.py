from django.db import models


class ProcessedWebhookEvent(models.Model):
    """Marker written once per provider event id; its presence means the event was applied."""

    APPLIED = "applied"
    UNMATCHED = "unmatched"
    OUTCOMES = [
        (APPLIED, "Applied"),
        (UNMATCHED, "Unmatched"),
    ]

    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=100)
    outcome = models.CharField(max_length=20, choices=OUTCOMES, default=APPLIED)
    object_id = models.CharField(max_length=255, blank=True)
    payload_sha256 = models.CharField(max_length=64)
    processed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-processed_at"]

    def __str__(self):
        return f"{self.event_type} {self.event_id} ({self.outcome})"
