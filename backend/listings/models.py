from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

PROPERTY = "property"
SERVICE = "service"
LEISURE = "leisure"
ITEM_TYPES = (PROPERTY, SERVICE, LEISURE)
ITEM_TYPE_CHOICES = [
    (PROPERTY, "Property"),
    (SERVICE, "Service"),
    (LEISURE, "Leisure activity"),
]


class BookableItem(models.Model):
    """Shared shape of everything that can be reserved for a date."""

    item_type: str = ""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="%(class)s_listings",
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    max_guests = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=14, decimal_places=3)
    currency = models.CharField(max_length=3, default="GBP")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["title", "id"]

    def __str__(self):
        return self.title

    @property
    def cleaning_fee_amount(self):
        return None


class Property(BookableItem):
    item_type = PROPERTY

    address = models.CharField(max_length=255, blank=True)
    cleaning_fee = models.DecimalField(max_digits=14, decimal_places=3, null=True, blank=True)

    class Meta(BookableItem.Meta):
        verbose_name_plural = "properties"

    @property
    def cleaning_fee_amount(self):
        return self.cleaning_fee


class Service(BookableItem):
    item_type = SERVICE


class LeisureActivity(BookableItem):
    item_type = LEISURE

    class Meta(BookableItem.Meta):
        verbose_name_plural = "leisure activities"


ITEM_MODELS = {
    PROPERTY: Property,
    SERVICE: Service,
    LEISURE: LeisureActivity,
}


def resolve_item(item_type: str, item_id) -> BookableItem | None:
    """Look up a bookable item by (item_type, item_id); None when it does not exist."""
    model = ITEM_MODELS.get(item_type)
    if model is None:
        return None
    return model.objects.select_related("owner").filter(pk=item_id).first()
