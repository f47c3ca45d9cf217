from django.contrib import admin
from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.api import LoginView, MeView
from bookings.api import (
    AvailabilityView,
    BookingCancelView,
    BookingDetailView,
    BookingListCreateView,
)
from commissions.api import CommissionListCreateView, CommissionSummaryView
from notifications.api import NotificationListView, NotificationReadView
from payments.api import StripeIdentityWebhookView, StripeWebhookView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/login/", LoginView.as_view(), name="auth-login"),
    path("api/auth/refresh/", TokenRefreshView.as_view(), name="auth-refresh"),
    path("api/auth/me/", MeView.as_view(), name="auth-me"),
    path("api/bookings/availability/", AvailabilityView.as_view(), name="booking-availability"),
    path("api/bookings/", BookingListCreateView.as_view(), name="booking-list"),
    path("api/bookings/<int:booking_id>/", BookingDetailView.as_view(), name="booking-detail"),
    path(
        "api/bookings/<int:booking_id>/cancel/",
        BookingCancelView.as_view(),
        name="booking-cancel",
    ),
    path("api/commissions/", CommissionListCreateView.as_view(), name="commission-list"),
    path(
        "api/commissions/summary/",
        CommissionSummaryView.as_view(),
        name="commission-summary",
    ),
    path("api/notifications/", NotificationListView.as_view(), name="notification-list"),
    path(
        "api/notifications/<int:notification_id>/read/",
        NotificationReadView.as_view(),
        name="notification-read",
    ),
    path("api/webhooks/stripe/", StripeWebhookView.as_view(), name="stripe-webhook"),
    path(
        "api/webhooks/stripe/identity/",
        StripeIdentityWebhookView.as_view(),
        name="stripe-identity-webhook",
    ),
]
