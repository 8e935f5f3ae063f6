"""Claims endpoints of the remote backend."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from municipal_portal.api.client import ApiClient, parse_response
from municipal_portal.claims.models import ApiModel, Claim, MessageAttachment
from municipal_portal.core.errors import RemoteError


class CreateClaimResponse(ApiModel):
    claim_id: str
    claim_number: str | None = None
    message: str = ""


class SendMessagePayload(ApiModel):
    claim_id: str
    message: str
    attachments: list[MessageAttachment] = []


class SendMessageResponse(ApiModel):
    message_id: str = ""
    timestamp: str | None = None


class ClaimsApi:
    """``/claims`` resource client."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_claims(self, token: str) -> list[Claim]:
        data = await self._client.request("GET", "/claims", token)
        return [parse_response(Claim, item) for item in data or []]

    async def get_claim(self, claim_id: str, token: str) -> Claim:
        data = await self._client.request("GET", f"/claims/{claim_id}", token)
        if data is None:
            raise RemoteError(502, f"Empty response for claim {claim_id!r}")
        return parse_response(Claim, data)

    async def create_claim(self, payload: BaseModel, token: str) -> CreateClaimResponse:
        data = await self._client.request(
            "POST", "/claims", token, json=payload.model_dump(mode="json", by_alias=True)
        )
        if not data:
            raise RemoteError(502, "Empty response to claim creation")
        return parse_response(CreateClaimResponse, data)

    async def send_message(
        self, claim_id: str, payload: SendMessagePayload, token: str
    ) -> SendMessageResponse:
        data: Any = await self._client.request(
            "POST",
            f"/claims/{claim_id}/messages",
            token,
            json=payload.model_dump(mode="json", by_alias=True),
        )
        return parse_response(SendMessageResponse, data or {})
