from django.conf import settings
from django.db import models
from django.utils import timezone

from listings.models import ITEM_TYPE_CHOICES


class BookingQuerySet(models.QuerySet):
    def for_item(self, item_type: str, item_id):
        return self.filter(item_type=item_type, item_id=item_id)

    def holding_capacity(self):
        return self.exclude(status=Booking.CANCELLED)

    def guests_on(self, item_type: str, item_id, day) -> int:
        total = (
            self.for_item(item_type, item_id)
            .holding_capacity()
            .filter(date=day)
            .aggregate(total=models.Sum("guests"))["total"]
        )
        return total or 0


class Booking(models.Model):
    """One calendar day of a reservation against a bookable item."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    STATUSES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (CANCELLED, "Cancelled"),
    ]

    UNPAID = "unpaid"
    PAID = "paid"
    PAYMENT_STATUSES = [
        (UNPAID, "Unpaid"),
        (PAID, "Paid"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    item_type = models.CharField(max_length=20, choices=ITEM_TYPE_CHOICES)
    item_id = models.PositiveBigIntegerField()
    date = models.DateField()
    guests = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    payment_status = models.CharField(max_length=12, choices=PAYMENT_STATUSES, default=UNPAID)
    payment_intent_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    total_amount = models.DecimalField(max_digits=14, decimal_places=3, default=0)
    currency = models.CharField(max_length=3, default="GBP")
    special_requests = models.TextField(blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        ordering = ["date", "id"]
        indexes = [
            models.Index(fields=["item_type", "item_id", "date"], name="booking_item_day_idx"),
        ]

    def __str__(self):
        return f"{self.item_type}:{self.item_id} on {self.date} ({self.guests})"

    @property
    def is_awaiting_payment(self) -> bool:
        return self.status == self.PENDING and self.payment_status == self.UNPAID

    def mark_confirmed(self):
        self.status = self.CONFIRMED
        self.payment_status = self.PAID
        self.confirmed_at = timezone.now()
        self.save(update_fields=["status", "payment_status", "confirmed_at", "updated_at"])

    def mark_cancelled(self):
        self.status = self.CANCELLED
        self.cancelled_at = timezone.now()
        self.save(update_fields=["status", "cancelled_at", "updated_at"])


class ReservationLock(models.Model):
    """
    Row locked with SELECT ... FOR UPDATE while checking and inserting bookings
    for one (item_type, item_id, date); serializes writers competing for that day.
    """

    item_type = models.CharField(max_length=20, choices=ITEM_TYPE_CHOICES)
    item_id = models.PositiveBigIntegerField()
    date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["item_type", "item_id", "date"],
                name="unique_reservation_lock_day",
            )
        ]

    def __str__(self):
        return f"lock {self.item_type}:{self.item_id} {self.date}"
