"""
Boundary to the notification delivery collaborator.

Core services only decide *what* to send; a dispatcher is injected into them
and delivery is best-effort relative to the ledger: a failed enqueue is logged
and never undoes a committed state change.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Protocol

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils.module_loading import import_string

from .emails import send_notification_email
from .models import Notification

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    def enqueue(self, recipient_user_id: int, type: str, payload: Dict[str, Any]) -> None:
        ...


@dataclass(frozen=True)
class OutgoingNotification:
    recipient_user_id: int
    type: str
    title: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def payload(self) -> Dict[str, Any]:
        return {"title": self.title, "message": self.message, "data": self.data}


class DatabaseNotificationDispatcher:
    """Stores an in-app Notification row and optionally emails the recipient."""

    def enqueue(self, recipient_user_id: int, type: str, payload: Dict[str, Any]) -> None:
        notification = Notification.objects.create(
            recipient_id=recipient_user_id,
            type=type,
            title=payload.get("title", ""),
            message=payload.get("message", ""),
            data=payload.get("data") or {},
        )
        if settings.NOTIFICATION_EMAILS_ENABLED:
            self._send_email(notification)

    def _send_email(self, notification: Notification) -> None:
        email = (
            get_user_model()
            .objects.filter(pk=notification.recipient_id)
            .values_list("email", flat=True)
            .first()
        )
        if not email:
            return
        send_notification_email(
            recipient_email=email,
            title=notification.title or notification.get_type_display(),
            message=notification.message,
            link_path=f"notifications/{notification.pk}",
        )


def get_dispatcher() -> NotificationDispatcher:
    return import_string(settings.NOTIFICATION_DISPATCHER)()


def fan_out(dispatcher: NotificationDispatcher, notifications: Iterable[OutgoingNotification]) -> int:
    """Attempt every notification; return how many were handed to the dispatcher."""
    delivered = 0
    for notification in notifications:
        try:
            dispatcher.enqueue(notification.recipient_user_id, notification.type, notification.payload)
        except Exception:
            logger.exception(
                "Failed to enqueue %s notification for user %s",
                notification.type,
                notification.recipient_user_id,
            )
            continue
        delivered += 1
    return delivered
