from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from bookings.models import Booking
from listings.models import LeisureActivity, Property, Service, PROPERTY, SERVICE

SEED_PASSWORD = "Marketplace123!"
SUPERUSER_EMAIL = "admin@marketplace.test"
SUPERUSER_PASSWORD = "AdminMarketplace123!"


class Command(BaseCommand):
    help = "Populate the local development database with sample listings and bookings."

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Refusing to seed data while DEBUG is False.")

        with transaction.atomic():
            self.stdout.write(self.style.MIGRATE_HEADING("Creating users"))
            provider = self._ensure_user(
                email="provider@marketplace.test",
                display_name="Priya Provider",
                role=User.ROLE_PROVIDER,
            )
            agent = self._ensure_user(
                email="agent@marketplace.test",
                display_name="Alex Agent",
                role=User.ROLE_AGENT,
            )
            if not agent.is_verified:
                agent.mark_verified()
            guest = self._ensure_user(
                email="guest@marketplace.test",
                display_name="Greta Guest",
                role=User.ROLE_USER,
            )

            self.stdout.write(self.style.MIGRATE_HEADING("Creating listings"))
            cottage, _ = Property.objects.update_or_create(
                owner=provider,
                title="Harbour Cottage",
                defaults={
                    "address": "1 Quay Street, Falmouth",
                    "max_guests": 4,
                    "price": Decimal("120.00"),
                    "cleaning_fee": Decimal("25.00"),
                },
            )
            chef, _ = Service.objects.update_or_create(
                owner=provider,
                title="Private Chef Evening",
                defaults={"max_guests": 8, "price": Decimal("300.00")},
            )
            LeisureActivity.objects.update_or_create(
                owner=provider,
                title="Coastal Kayak Tour",
                defaults={"max_guests": 6, "price": Decimal("45.00")},
            )

            self.stdout.write(self.style.MIGRATE_HEADING("Creating bookings"))
            today = timezone.localdate()
            for offset, item_type, item, guests in (
                (3, PROPERTY, cottage, 2),
                (4, PROPERTY, cottage, 4),
                (7, SERVICE, chef, 5),
            ):
                Booking.objects.get_or_create(
                    user=guest,
                    item_type=item_type,
                    item_id=item.pk,
                    date=today + timedelta(days=offset),
                    defaults={
                        "guests": guests,
                        "total_amount": item.price,
                        "currency": item.currency,
                    },
                )

            self._ensure_superuser()

        self.stdout.write(self.style.SUCCESS("Seed data ready."))
        self.stdout.write(f"Sample password for all seeded users: {SEED_PASSWORD}")

    def _ensure_user(self, email: str, display_name: str, role: str) -> User:
        user, created = User.objects.get_or_create(
            email=email,
            defaults={
                "username": email,
                "display_name": display_name,
                "role": role,
            },
        )
        if created:
            user.set_password(SEED_PASSWORD)
            user.save()
        else:
            fields_to_update = {}
            if user.display_name != display_name:
                fields_to_update["display_name"] = display_name
            if user.role != role:
                fields_to_update["role"] = role
            if fields_to_update:
                for attr, value in fields_to_update.items():
                    setattr(user, attr, value)
                user.save(update_fields=list(fields_to_update.keys()))
        return user

    def _ensure_superuser(self) -> None:
        if User.objects.filter(email=SUPERUSER_EMAIL).exists():
            return
        User.objects.create_superuser(
            username=SUPERUSER_EMAIL,
            email=SUPERUSER_EMAIL,
            password=SUPERUSER_PASSWORD,
        )
        self.stdout.write(f"Created superuser {SUPERUSER_EMAIL}")
