"""Claim submission: build the immutable payload and post it to the backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from pydantic import ConfigDict

from municipal_portal.api.claims import ClaimsApi
from municipal_portal.auth.session import CurrentUser, SessionProvider, require_token, require_user
from municipal_portal.claims.models import ApiModel
from municipal_portal.forms.evaluator import prune_hidden
from municipal_portal.services.registry import ServiceRegistry
from municipal_portal.uploads.pipeline import UploadedAttachment

if TYPE_CHECKING:
    from municipal_portal.drafts.models import ClaimDraft

logger = logging.getLogger(__name__)


class _FrozenApiModel(ApiModel):
    model_config = ConfigDict(frozen=True)


class PayloadUser(_FrozenApiModel):
    id: str
    email: str
    name: str
    phone: str | None = None


class PayloadLocation(_FrozenApiModel):
    address: str = ""
    latitude: float | None = None
    longitude: float | None = None


class PayloadClaim(_FrozenApiModel):
    service_type: str
    title: str
    description: str
    priority: str
    location: PayloadLocation
    attachments: tuple[UploadedAttachment, ...] = ()
    extra_data: dict[str, str]


class ClaimPayload(_FrozenApiModel):
    """Body of ``POST /claims``. Never mutated once built."""

    user: PayloadUser
    claim: PayloadClaim


class SubmissionResult(ApiModel):
    claim_id: str
    claim_number: str | None = None
    message: str = ""


def build_claim_payload(
    draft: ClaimDraft,
    user: CurrentUser,
    attachments: Sequence[UploadedAttachment],
    registry: ServiceRegistry,
) -> ClaimPayload:
    """Assemble the submission payload from a draft snapshot.

    The backend only knows stable service codes, so the draft's internal
    service id is mapped through the registry.

    Raises:
        ConfigError: If the draft's service is not in the registry.
    """
    service = registry.lookup(draft.service_id)
    return ClaimPayload(
        user=PayloadUser(
            id=user.id,
            email=user.email,
            name=user.name,
            phone=user.phone,
        ),
        claim=PayloadClaim(
            service_type=service.code,
            title=draft.title.strip(),
            description=draft.description.strip(),
            priority=str(draft.priority),
            location=PayloadLocation(
                address=draft.location_address,
                latitude=draft.latitude,
                longitude=draft.longitude,
            ),
            attachments=tuple(attachments),
            extra_data=prune_hidden(service, draft.extra_field_values),
        ),
    )


class ClaimSubmission:
    """Submits a claim once; failures are surfaced, never retried here."""

    def __init__(
        self,
        api: ClaimsApi,
        session: SessionProvider,
        registry: ServiceRegistry,
    ) -> None:
        self._api = api
        self._session = session
        self._registry = registry

    async def submit(
        self, draft: ClaimDraft, attachments: Sequence[UploadedAttachment]
    ) -> SubmissionResult:
        """Post the draft to the backend.

        Raises:
            AuthError: If no session token or user is available.
            RemoteError: If the backend rejects the payload.
            ConfigError: If the draft's service is unknown.
        """
        token = await require_token(self._session)
        user = require_user(self._session)
        payload = build_claim_payload(draft, user, attachments, self._registry)

        resp = await self._api.create_claim(payload, token)
        logger.info(
            "claim submitted: id=%s number=%s service=%s",
            resp.claim_id, resp.claim_number, payload.claim.service_type,
        )
        return SubmissionResult(
            claim_id=resp.claim_id,
            claim_number=resp.claim_number,
            message=resp.message,
        )
