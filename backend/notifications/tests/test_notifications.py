import pytest
from django.core import mail

from notifications.dispatch import DatabaseNotificationDispatcher, OutgoingNotification, fan_out
from notifications.models import Notification


def _note(recipient_id, type=Notification.NEW_BOOKING):
    return OutgoingNotification(
        recipient_user_id=recipient_id,
        type=type,
        title="New Booking Request",
        message="Someone booked",
        data={"bookingId": 1},
    )


@pytest.mark.django_db
def test_database_dispatcher_stores_notification(guest, settings):
    settings.NOTIFICATION_EMAILS_ENABLED = False

    DatabaseNotificationDispatcher().enqueue(guest.pk, Notification.NEW_BOOKING, _note(guest.pk).payload)

    notification = Notification.objects.get()
    assert notification.recipient == guest
    assert notification.title == "New Booking Request"
    assert notification.data == {"bookingId": 1}
    assert mail.outbox == []


@pytest.mark.django_db
def test_database_dispatcher_emails_when_enabled(guest, settings):
    settings.NOTIFICATION_EMAILS_ENABLED = True
    settings.FRONTEND_URL = "https://app.test/"

    DatabaseNotificationDispatcher().enqueue(guest.pk, Notification.NEW_BOOKING, _note(guest.pk).payload)

    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == ["guest@example.com"]
    assert message.subject == "New Booking Request"
    assert f"https://app.test/notifications/{Notification.objects.get().pk}" in message.body


def test_fan_out_attempts_every_notification():
    class Flaky:
        def __init__(self):
            self.calls = []

        def enqueue(self, recipient_user_id, type, payload):
            self.calls.append(recipient_user_id)
            if recipient_user_id == 1:
                raise RuntimeError("pusher down")

    flaky = Flaky()

    delivered = fan_out(flaky, [_note(1), _note(2)])

    assert flaky.calls == [1, 2]
    assert delivered == 1


@pytest.mark.django_db
def test_list_only_returns_own_notifications(guest_client, guest, provider):
    Notification.objects.create(recipient=guest, type=Notification.BOOKING_CONFIRMED, title="Mine")
    Notification.objects.create(recipient=provider, type=Notification.NEW_CONFIRMED_BOOKING, title="Theirs")

    response = guest_client.get("/api/notifications/")

    assert response.status_code == 200
    assert [row["title"] for row in response.json()] == ["Mine"]


@pytest.mark.django_db
def test_list_filters_by_read_state(guest_client, guest):
    Notification.objects.create(recipient=guest, type=Notification.NEW_BOOKING, title="Old", is_read=True)
    Notification.objects.create(recipient=guest, type=Notification.NEW_BOOKING, title="New")

    response = guest_client.get("/api/notifications/", {"is_read": "false"})

    assert [row["title"] for row in response.json()] == ["New"]


@pytest.mark.django_db
def test_mark_read(guest_client, guest, provider):
    mine = Notification.objects.create(recipient=guest, type=Notification.NEW_BOOKING)
    theirs = Notification.objects.create(recipient=provider, type=Notification.NEW_BOOKING)

    response = guest_client.post(f"/api/notifications/{mine.pk}/read/")

    assert response.status_code == 200
    mine.refresh_from_db()
    assert mine.is_read and mine.read_at is not None
    assert guest_client.post(f"/api/notifications/{theirs.pk}/read/").status_code == 404
