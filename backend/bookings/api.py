from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.models import Booking
from bookings.serializers import BookingSerializer
from bookings.services.availability import check_availability, parse_availability_query
from bookings.services.reservations import ReservationService, parse_reservation_request
from core.results import Failure, failure_response


class AvailabilityView(APIView):
    """Advisory per-day availability for an item; open to anonymous callers."""

    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        parsed = parse_availability_query(request.data)
        if isinstance(parsed, Failure):
            return failure_response(parsed)
        result = check_availability(parsed.value)
        if isinstance(result, Failure):
            return failure_response(result)
        return Response(result.value.as_dict())


class BookingListCreateView(generics.ListAPIView):
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "payment_status", "item_type"]
    ordering_fields = ["date", "created_at"]

    def get_queryset(self):
        return Booking.objects.filter(user=self.request.user)

    def post(self, request, *args, **kwargs):
        parsed = parse_reservation_request(request.data)
        if isinstance(parsed, Failure):
            return failure_response(parsed)
        result = ReservationService().reserve(request.user, parsed.value)
        if isinstance(result, Failure):
            return failure_response(result)
        return Response(result.value.as_dict(), status=status.HTTP_201_CREATED)


class BookingDetailView(generics.RetrieveAPIView):
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_url_kwarg = "booking_id"

    def get_queryset(self):
        return Booking.objects.filter(user=self.request.user)


class BookingCancelView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, booking_id, *args, **kwargs):
        result = ReservationService().cancel(request.user, booking_id)
        if isinstance(result, Failure):
            return failure_response(result)
        return Response(BookingSerializer(result.value).data)
