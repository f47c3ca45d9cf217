from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from commissions.models import Commission
from commissions.services import CommissionRequest, CommissionService, agent_summary
from core.results import ErrorKind
from notifications.models import Notification

User = get_user_model()


@pytest.fixture
def agent(db):
    user = User.objects.create_user(
        username="agent@example.com",
        email="agent@example.com",
        password="examplepass",
        role=User.ROLE_AGENT,
    )
    user.mark_verified(session_id="vs_agent")
    return user


@pytest.fixture
def agent_client(agent, api_client):
    api_client.force_authenticate(agent)
    return api_client


def _payload(cottage, agent, sale="1000"):
    return {"propertyId": cottage.pk, "agentId": agent.pk, "saleAmount": sale}


@pytest.mark.django_db
def test_create_commission(guest_client, cottage, agent):
    response = guest_client.post("/api/commissions/", _payload(cottage, agent), format="json")

    assert response.status_code == 201
    body = response.json()
    assert body["total_commission"] == "30.00"
    assert body["platform_fee"] == "1.50"
    assert body["agent_commission"] == "28.50"
    assert body["agent_commission_display"] == "£28.50"
    assert body["status"] == "pending"

    notification = Notification.objects.get(recipient=agent)
    assert notification.type == Notification.COMMISSION
    assert notification.data == {"commissionId": body["id"], "propertyId": cottage.pk}
    assert "£28.50" in notification.message


@pytest.mark.django_db
def test_missing_fields_are_invalid(guest_client):
    response = guest_client.post("/api/commissions/", {"propertyId": 1}, format="json")

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID_INPUT"
    assert set(error["details"]) == {"agentId", "saleAmount"}


@pytest.mark.django_db
@pytest.mark.parametrize("sale", ["-10", "0", "lots"])
def test_sale_amount_must_be_positive(guest_client, cottage, agent, sale):
    response = guest_client.post("/api/commissions/", _payload(cottage, agent, sale), format="json")

    assert response.status_code == 400
    assert not Commission.objects.exists()


@pytest.mark.django_db
def test_unknown_property_or_agent_is_not_found(guest_client, cottage, agent, guest):
    missing_property = {"propertyId": cottage.pk + 1, "agentId": agent.pk, "saleAmount": "1000"}
    assert guest_client.post("/api/commissions/", missing_property, format="json").status_code == 404

    not_an_agent = {"propertyId": cottage.pk, "agentId": guest.pk, "saleAmount": "1000"}
    assert guest_client.post("/api/commissions/", not_an_agent, format="json").status_code == 404


@pytest.mark.django_db
def test_unverified_agent_is_forbidden(guest_client, cottage):
    rookie = User.objects.create_user(
        username="rookie@example.com", email="rookie@example.com", password="x", role=User.ROLE_AGENT
    )

    response = guest_client.post("/api/commissions/", _payload(cottage, rookie), format="json")

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.django_db
def test_idempotency_key_returns_existing_record(guest_client, cottage, agent):
    headers = {"HTTP_IDEMPOTENCY_KEY": "sale-42"}

    first = guest_client.post("/api/commissions/", _payload(cottage, agent), format="json", **headers)
    second = guest_client.post("/api/commissions/", _payload(cottage, agent), format="json", **headers)

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    assert Commission.objects.count() == 1
    assert Notification.objects.filter(type=Notification.COMMISSION).count() == 1


@pytest.mark.django_db
def test_idempotency_key_reused_for_a_different_sale_conflicts(guest_client, cottage, agent):
    headers = {"HTTP_IDEMPOTENCY_KEY": "sale-43"}
    first = guest_client.post("/api/commissions/", _payload(cottage, agent), format="json", **headers)

    response = guest_client.post(
        "/api/commissions/", _payload(cottage, agent, sale="2500"), format="json", **headers
    )

    assert first.status_code == 201
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"
    assert Commission.objects.count() == 1


@pytest.mark.django_db
def test_without_key_each_submission_creates_a_record(guest_client, cottage, agent):
    guest_client.post("/api/commissions/", _payload(cottage, agent), format="json")
    guest_client.post("/api/commissions/", _payload(cottage, agent), format="json")

    assert Commission.objects.count() == 2


@pytest.mark.django_db
def test_sale_too_small_for_commission_is_invalid(cottage, agent, dispatcher):
    result = CommissionService(dispatcher=dispatcher).create(
        CommissionRequest(property_id=cottage.pk, agent_id=agent.pk, sale_amount=Decimal("0.10"))
    )

    assert result.kind is ErrorKind.INVALID_INPUT
    assert dispatcher.sent == []


@pytest.mark.django_db
def test_notification_failure_keeps_commission(cottage, agent, failing_dispatcher):
    result = CommissionService(dispatcher=failing_dispatcher).create(
        CommissionRequest(property_id=cottage.pk, agent_id=agent.pk, sale_amount=Decimal("500"))
    )

    assert result.value.created is True
    assert Commission.objects.count() == 1


@pytest.mark.django_db
def test_agent_list_and_summary(agent_client, agent, cottage, dispatcher):
    service = CommissionService(dispatcher=dispatcher)
    for sale in ("1000", "2000"):
        service.create(CommissionRequest(property_id=cottage.pk, agent_id=agent.pk, sale_amount=Decimal(sale)))
    Commission.objects.filter(sale_amount=Decimal("2000")).update(status=Commission.PAID)

    listing = agent_client.get("/api/commissions/")
    assert len(listing.json()) == 2

    summary = agent_client.get("/api/commissions/summary/").json()
    assert summary == agent_summary(agent)
    assert summary["pending"] == 1
    assert summary["paid"] == 1
    assert summary["cancelled"] == 0
    assert Decimal(summary["totalEarned"]) == Decimal("57.00")
    assert Decimal(summary["totalPending"]) == Decimal("28.50")
    assert Decimal(summary["totalPlatformFees"]) == Decimal("3.00")
