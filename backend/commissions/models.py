from django.conf import settings
from django.db import models


class CommissionQuerySet(models.QuerySet):
    def for_agent(self, agent):
        return self.filter(agent=agent)


class Commission(models.Model):
    """Fee split recorded for a single property sale."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
    STATUSES = [
        (PENDING, "Pending"),
        (PAID, "Paid"),
        (CANCELLED, "Cancelled"),
    ]

    property = models.ForeignKey(
        "listings.Property",
        on_delete=models.PROTECT,
        related_name="commissions",
    )
    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="commissions",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    sale_amount = models.DecimalField(max_digits=16, decimal_places=2)
    total_commission = models.DecimalField(max_digits=14, decimal_places=2)
    platform_fee = models.DecimalField(max_digits=14, decimal_places=2)
    agent_commission = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3, default="GBP")
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    idempotency_key = models.CharField(max_length=255, unique=True, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CommissionQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Commission {self.pk} for {self.agent_id} ({self.status})"
