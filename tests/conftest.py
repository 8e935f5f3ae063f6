"""Shared test fixtures and in-memory fakes for the remote collaborators."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from municipal_portal.api.claims import CreateClaimResponse, SendMessageResponse
from municipal_portal.auth.session import CurrentUser, StaticSessionProvider
from municipal_portal.claims.models import Claim, ClaimStatus, Notification
from municipal_portal.core.errors import RemoteError
from municipal_portal.services.registry import default_registry
from municipal_portal.sync.engine import SyncEngine
from municipal_portal.sync.store import ClaimsStore
from municipal_portal.uploads.pipeline import StagedFile, UploadedAttachment


class FakeClaimsApi:
    """Records calls; ``gate`` (an asyncio.Event) holds ``list_claims`` open."""

    def __init__(self) -> None:
        self.claims: dict[str, Claim] = {}
        self.calls: list[tuple[str, Any]] = []
        self.gate: asyncio.Event | None = None
        self.fail_with: Exception | None = None
        self.created: list[Any] = []
        self.sent: list[Any] = []

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    async def list_claims(self, token: str) -> list[Claim]:
        self.calls.append(("list_claims", token))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.claims.values())

    async def get_claim(self, claim_id: str, token: str) -> Claim:
        self.calls.append(("get_claim", claim_id))
        if self.fail_with is not None:
            raise self.fail_with
        if claim_id not in self.claims:
            raise RemoteError(404, "Claim not found")
        return self.claims[claim_id]

    async def create_claim(self, payload, token: str) -> CreateClaimResponse:
        self.calls.append(("create_claim", payload))
        if self.fail_with is not None:
            raise self.fail_with
        self.created.append(payload)
        claim_id = f"CLM-{len(self.created):03d}"
        self.claims[claim_id] = Claim(
            id=claim_id,
            claim_number=f"N-{len(self.created)}",
            service_type=payload.claim.service_type,
            title=payload.claim.title,
            description=payload.claim.description,
        )
        return CreateClaimResponse(
            claim_id=claim_id, claim_number=f"N-{len(self.created)}", message="created"
        )

    async def send_message(self, claim_id: str, payload, token: str) -> SendMessageResponse:
        self.calls.append(("send_message", payload))
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(payload)
        return SendMessageResponse(message_id=f"msg-{len(self.sent)}")


class FakeNotificationsApi:
    def __init__(self) -> None:
        self.notifications: list[Notification] = []
        self.calls: list[tuple[str, Any]] = []

    async def list_notifications(self, token: str) -> list[Notification]:
        self.calls.append(("list_notifications", token))
        return list(self.notifications)

    async def mark_read(self, notification_id: str, token: str) -> None:
        self.calls.append(("mark_read", notification_id))

    async def mark_all_read(self, token: str) -> None:
        self.calls.append(("mark_all_read", None))


class FakeUploader:
    """Uploads complete after per-file ``delays``; names in ``fail`` raise."""

    def __init__(self, delays: dict[str, float] | None = None, fail: set[str] | None = None) -> None:
        self.delays = delays or {}
        self.fail = fail or set()
        self.completed: list[str] = []

    async def upload(self, file: StagedFile) -> UploadedAttachment:
        await asyncio.sleep(self.delays.get(file.file_name, 0))
        if file.file_name in self.fail:
            raise RuntimeError(f"storage refused {file.file_name}")
        self.completed.append(file.file_name)
        return UploadedAttachment(
            url=f"https://cdn.example.com/claims/{file.file_name}",
            file_name=file.file_name,
            file_type=file.content_type,
        )


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def user():
    return CurrentUser(
        id="citizen-001",
        email="resident@example.com",
        name="Bensaddik Mohamed",
        phone="+212600000000",
    )


@pytest.fixture
def session(user):
    return StaticSessionProvider(user=user, token="test-token")


@pytest.fixture
def claims_api():
    return FakeClaimsApi()


@pytest.fixture
def notifications_api():
    return FakeNotificationsApi()


@pytest.fixture
def store():
    return ClaimsStore()


@pytest.fixture
def sync(claims_api, notifications_api, session, store):
    return SyncEngine(claims_api, notifications_api, session, store)


@pytest.fixture
def make_claim():
    def _make(claim_id: str = "CLM-001", status: ClaimStatus = ClaimStatus.IN_PROGRESS, **kwargs) -> Claim:
        data: dict[str, Any] = {
            "id": claim_id,
            "userId": "citizen-001",
            "serviceType": "WM",
            "serviceName": "Gestion de l'Eau Potable",
            "title": "Fuite d'eau rue principale",
            "description": "Fuite au coin de la rue depuis 3 jours.",
            "status": status,
            "createdAt": "2025-06-08T10:30:00Z",
            "updatedAt": "2025-06-10T14:20:00Z",
        }
        data.update(kwargs)
        return Claim.model_validate(data)
    return _make


@pytest.fixture
def make_file():
    def _make(name: str = "photo.jpg", content_type: str = "image/jpeg", size: int = 16) -> StagedFile:
        return StagedFile(file_name=name, content_type=content_type, content=b"x" * size)
    return _make
