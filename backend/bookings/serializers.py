from rest_framework import serializers

from bookings.models import Booking


class BookingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Booking
        fields = [
            "id",
            "item_type",
            "item_id",
            "date",
            "guests",
            "status",
            "payment_status",
            "total_amount",
            "currency",
            "special_requests",
            "confirmed_at",
            "cancelled_at",
            "created_at",
        ]
        read_only_fields = fields
