"""Sending messages on a claim's conversation."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Sequence

from municipal_portal.api.claims import ClaimsApi, SendMessagePayload
from municipal_portal.auth.session import SessionProvider, require_token
from municipal_portal.claims.models import Claim, ClaimMessage, MessageAttachment, SenderRole
from municipal_portal.core.config import MessagingConfig
from municipal_portal.core.errors import ClosedClaimError, PortalError, ValidationError
from municipal_portal.sync.engine import SyncEngine
from municipal_portal.sync.store import ClaimsStore

logger = logging.getLogger(__name__)


def can_send(claim: Claim | None) -> bool:
    """Whether the compose box should be enabled for ``claim``."""
    return claim is not None and not claim.is_closed


class MessagingService:
    """Sends resident messages and pulls back the authoritative conversation.

    The sent message is not spliced in locally; a per-claim refresh replaces
    the conversation with the backend's copy. With ``optimistic_echo`` a
    pending placeholder is shown until that refresh lands. A failed refresh
    after a successful send is logged and the cached claim is returned.
    """

    def __init__(
        self,
        claims_api: ClaimsApi,
        session: SessionProvider,
        sync: SyncEngine,
        config: MessagingConfig | None = None,
    ) -> None:
        self._api = claims_api
        self._session = session
        self._sync = sync
        self.config = config or MessagingConfig()

    @property
    def store(self) -> ClaimsStore:
        return self._sync.store

    async def send_message(
        self,
        claim_id: str,
        content: str,
        attachments: Sequence[MessageAttachment] = (),
    ) -> Claim:
        """Send ``content`` on a claim and return the refreshed claim.

        Raises:
            ClosedClaimError: If the claim is resolved or rejected. Nothing is sent.
            ValidationError: If the message is blank.
            AuthError: If no session token is available.
            RemoteError: If the backend rejects the message.
        """
        claim = self.store.get_claim(claim_id)
        if claim is not None and claim.is_closed:
            raise ClosedClaimError(claim_id, claim.status)
        text = content.strip()
        if not text:
            raise ValidationError({"content": ["Le message ne peut pas être vide."]})

        token = await require_token(self._session)
        if claim is None:
            claim = await self._sync.refresh_claim_by_id(claim_id)
            if claim.is_closed:
                raise ClosedClaimError(claim_id, claim.status)
        if self.config.optimistic_echo:
            self._echo(claim_id, text, attachments)

        payload = SendMessagePayload(
            claim_id=claim_id, message=text, attachments=list(attachments)
        )
        try:
            resp = await self._api.send_message(claim_id, payload, token)
        except PortalError:
            self.store.discard_pending_messages(claim_id)
            raise
        logger.debug("message %s sent on claim %s", resp.message_id, claim_id)
        try:
            return await self._sync.refresh_claim_by_id(claim_id)
        except PortalError as exc:
            # The message is stored server-side; the next poll brings it in.
            logger.warning("Could not refresh claim %s after sending: %s", claim_id, exc)
            return self.store.get_claim(claim_id) or claim

    def _echo(
        self, claim_id: str, text: str, attachments: Sequence[MessageAttachment]
    ) -> None:
        user = self._session.current_user
        self.store.append_pending_message(
            claim_id,
            ClaimMessage(
                id=f"pending-{uuid.uuid4().hex}",
                claim_id=claim_id,
                sender_id=user.id if user else "",
                sender_name=user.name if user else "",
                sender_role=SenderRole.CITIZEN,
                content=text,
                timestamp=datetime.now(timezone.utc),
                attachments=list(attachments),
            ),
        )
