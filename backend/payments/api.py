from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.results import Failure

from .services.reconciler import IDENTITY_EVENTS, WebhookReconciler


class StripeWebhookView(APIView):
    """Receive Stripe payment, subscription and identity events."""

    permission_classes: list = []
    authentication_classes: list = []
    event_types = None

    def get_secret(self) -> str:
        return settings.STRIPE_WEBHOOK_SECRET

    def get_reconciler(self) -> WebhookReconciler:
        return WebhookReconciler(
            secret=self.get_secret(),
            tolerance=settings.STRIPE_WEBHOOK_TOLERANCE,
            event_types=self.event_types,
        )

    def post(self, request, *args, **kwargs):
        result = self.get_reconciler().reconcile(
            request.body,
            request.META.get("HTTP_STRIPE_SIGNATURE"),
        )
        if isinstance(result, Failure):
            return Response(status=result.kind.http_status)
        return Response(status=status.HTTP_200_OK)


class StripeIdentityWebhookView(StripeWebhookView):
    """Receive Stripe Identity verification session events."""

    event_types = IDENTITY_EVENTS

    def get_secret(self) -> str:
        return settings.STRIPE_IDENTITY_WEBHOOK_SECRET or settings.STRIPE_WEBHOOK_SECRET
