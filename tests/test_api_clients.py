"""Tests for the claims and notifications HTTP clients."""

from __future__ import annotations

import json

import httpx
import pytest

from municipal_portal.api.claims import ClaimsApi, SendMessagePayload
from municipal_portal.api.client import ApiClient
from municipal_portal.api.notifications import NotificationsApi
from municipal_portal.claims.models import ClaimStatus, NotificationKind, SenderRole
from municipal_portal.core.config import ApiConfig
from municipal_portal.core.errors import GENERIC_REMOTE_MESSAGE, RemoteError

BASE = "http://localhost:8080/api"

_CLAIM_JSON = {
    "id": "CLM-001",
    "claimNumber": "2025-000123",
    "userId": "citizen-001",
    "serviceType": "WM",
    "serviceName": "Gestion de l'Eau Potable",
    "title": "Fuite d'eau rue principale",
    "description": "Fuite depuis 3 jours.",
    "location": "Rue Principale & Avenue Oak",
    "attachmentUrls": ["https://cdn.example.com/claims/a.jpg"],
    "extraData": {"accountNumber": "WAT-123456", "floor": 2},
    "status": "in_progress",
    "assignedTo": {"operatorId": "op-7", "operatorName": "Équipe Eau Potable"},
    "createdAt": "2025-06-08T10:30:00Z",
    "updatedAt": "2025-06-10T14:20:00Z",
    "messages": [
        {
            "id": "msg-002",
            "claimId": "CLM-001",
            "senderId": "service-water",
            "senderName": "Équipe Eau Potable",
            "senderType": "service",
            "content": "Une équipe est en route.",
            "timestamp": "2025-06-09T09:30:00Z",
        },
        {
            "id": "msg-001",
            "claimId": "CLM-001",
            "senderId": "citizen-001",
            "senderName": "Bensaddik Mohamed",
            "senderRole": "citizen",
            "content": "La fuite s'aggrave.",
            "timestamp": "2025-06-09T08:00:00Z",
        },
    ],
}


@pytest.fixture
def api_client():
    return ApiClient(ApiConfig())


class TestApiClient:
    @pytest.mark.asyncio
    async def test_sets_auth_and_content_type(self, httpx_mock, api_client):
        httpx_mock.add_response(url=f"{BASE}/claims", method="GET", json=[])
        await api_client.request("GET", "/claims", "tok-123")
        request = httpx_mock.get_request()
        assert request.headers["Authorization"] == "Bearer tok-123"
        assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_error_uses_server_message(self, httpx_mock, api_client):
        httpx_mock.add_response(
            url=f"{BASE}/claims", method="POST", status_code=422,
            json={"message": "Service inconnu"},
        )
        with pytest.raises(RemoteError) as excinfo:
            await api_client.request("POST", "/claims", "tok", json={})
        assert excinfo.value.status == 422
        assert excinfo.value.user_message == "Service inconnu"

    @pytest.mark.asyncio
    async def test_error_without_body(self, httpx_mock, api_client):
        httpx_mock.add_response(url=f"{BASE}/claims", method="GET", status_code=500, text="boom")
        with pytest.raises(RemoteError) as excinfo:
            await api_client.request("GET", "/claims", "tok")
        assert excinfo.value.status == 500
        assert "HTTP 500" in excinfo.value.message

    @pytest.mark.asyncio
    async def test_transport_error_status_zero(self, httpx_mock, api_client):
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))
        with pytest.raises(RemoteError) as excinfo:
            await api_client.request("GET", "/claims", "tok")
        assert excinfo.value.status == 0

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, httpx_mock, api_client):
        httpx_mock.add_response(url=f"{BASE}/notifications/read-all", method="PATCH", status_code=204)
        assert await api_client.request("PATCH", "/notifications/read-all", "tok") is None

    def test_generic_user_message(self):
        assert RemoteError(503).user_message == GENERIC_REMOTE_MESSAGE


class TestClaimsApi:
    @pytest.mark.asyncio
    async def test_get_claim_parses_backend_json(self, httpx_mock, api_client):
        httpx_mock.add_response(url=f"{BASE}/claims/CLM-001", method="GET", json=_CLAIM_JSON)
        claim = await ClaimsApi(api_client).get_claim("CLM-001", "tok")

        assert claim.claim_number == "2025-000123"
        assert claim.status == ClaimStatus.IN_PROGRESS
        assert claim.assigned_to.operator_name == "Équipe Eau Potable"
        assert claim.extra_data == {"accountNumber": "WAT-123456", "floor": "2"}
        assert [m.id for m in claim.messages] == ["msg-001", "msg-002"]
        assert claim.messages[1].sender_role == SenderRole.SERVICE

    @pytest.mark.asyncio
    async def test_list_claims(self, httpx_mock, api_client):
        httpx_mock.add_response(url=f"{BASE}/claims", method="GET", json=[_CLAIM_JSON])
        claims = await ClaimsApi(api_client).list_claims("tok")
        assert [c.id for c in claims] == ["CLM-001"]

    @pytest.mark.asyncio
    async def test_send_message(self, httpx_mock, api_client):
        httpx_mock.add_response(
            url=f"{BASE}/claims/CLM-001/messages", method="POST",
            json={"messageId": "msg-010", "timestamp": "2025-06-11T08:00:00Z"},
        )
        resp = await ClaimsApi(api_client).send_message(
            "CLM-001", SendMessagePayload(claim_id="CLM-001", message="Merci"), "tok"
        )
        assert resp.message_id == "msg-010"
        body = json.loads(httpx_mock.get_request().content)
        assert body == {"claimId": "CLM-001", "message": "Merci", "attachments": []}

    @pytest.mark.asyncio
    async def test_legacy_statuses_mapped(self, httpx_mock, api_client):
        httpx_mock.add_response(
            url=f"{BASE}/claims", method="GET",
            json=[{"id": "CLM-1", "status": "pending"}, {"id": "CLM-2", "status": "closed"}],
        )
        claims = await ClaimsApi(api_client).list_claims("tok")
        assert [c.status for c in claims] == [ClaimStatus.SUBMITTED, ClaimStatus.RESOLVED]
        assert claims[1].is_closed

    @pytest.mark.asyncio
    async def test_malformed_claim_is_remote_error(self, httpx_mock, api_client):
        httpx_mock.add_response(
            url=f"{BASE}/claims", method="GET", json=[{"id": "CLM-1", "status": "archived"}]
        )
        with pytest.raises(RemoteError) as excinfo:
            await ClaimsApi(api_client).list_claims("tok")
        assert excinfo.value.status == 502

    @pytest.mark.asyncio
    async def test_create_without_claim_id_is_remote_error(self, httpx_mock, api_client):
        httpx_mock.add_response(url=f"{BASE}/claims", method="POST", json={"message": "ok"})
        with pytest.raises(RemoteError) as excinfo:
            await ClaimsApi(api_client).create_claim(
                SendMessagePayload(claim_id="x", message="y"), "tok"
            )
        assert excinfo.value.status == 502


class TestNotificationsApi:
    @pytest.mark.asyncio
    async def test_list_notifications(self, httpx_mock, api_client):
        httpx_mock.add_response(
            url=f"{BASE}/notifications", method="GET",
            json=[{
                "id": "notif-001",
                "userId": "citizen-001",
                "claimId": "CLM-001",
                "type": "new_message",
                "title": "Nouvelle Réponse",
                "message": "L'équipe a répondu",
                "read": False,
                "createdAt": "2025-06-10T14:20:00Z",
            }],
        )
        notifications = await NotificationsApi(api_client).list_notifications("tok")
        assert notifications[0].kind == NotificationKind.NEW_MESSAGE
        assert notifications[0].read is False

    @pytest.mark.asyncio
    async def test_missing_endpoint_degrades_to_empty(self, httpx_mock, api_client):
        httpx_mock.add_response(url=f"{BASE}/notifications", method="GET", status_code=404)
        assert await NotificationsApi(api_client).list_notifications("tok") == []

    @pytest.mark.asyncio
    async def test_malformed_notification_is_remote_error(self, httpx_mock, api_client):
        httpx_mock.add_response(
            url=f"{BASE}/notifications", method="GET", json=[{"id": "n1", "type": "broadcast"}]
        )
        with pytest.raises(RemoteError) as excinfo:
            await NotificationsApi(api_client).list_notifications("tok")
        assert excinfo.value.status == 502

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, httpx_mock, api_client):
        httpx_mock.add_response(url=f"{BASE}/notifications", method="GET", status_code=500)
        with pytest.raises(RemoteError):
            await NotificationsApi(api_client).list_notifications("tok")

    @pytest.mark.asyncio
    async def test_mark_read(self, httpx_mock, api_client):
        httpx_mock.add_response(url=f"{BASE}/notifications/notif-001/read", method="PATCH")
        await NotificationsApi(api_client).mark_read("notif-001", "tok")
        assert httpx_mock.get_request().method == "PATCH"
