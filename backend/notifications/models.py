from django.conf import settings
from django.db import models


class Notification(models.Model):
    """In-app message addressed to exactly one user."""

    NEW_BOOKING = "NEW_BOOKING"
    BOOKING_CONFIRMED = "BOOKING_CONFIRMED"
    NEW_CONFIRMED_BOOKING = "NEW_CONFIRMED_BOOKING"
    COMMISSION = "COMMISSION"
    TYPES = [
        (NEW_BOOKING, "New booking request"),
        (BOOKING_CONFIRMED, "Booking confirmed"),
        (NEW_CONFIRMED_BOOKING, "New confirmed booking"),
        (COMMISSION, "Commission"),
    ]

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=40, choices=TYPES)
    title = models.CharField(max_length=200, blank=True)
    message = models.TextField(blank=True)
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.type} -> {self.recipient_id}"
