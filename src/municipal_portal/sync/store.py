"""In-memory shared state for claims and notifications."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from municipal_portal.claims.models import Claim, ClaimMessage, ClaimStatus, Notification
from municipal_portal.core.errors import PortalError


class ClaimsStore:
    """Cache of the resident's claims and notifications.

    Written by the sync engine (and by messaging for pending placeholders);
    every other component only reads. Claims are never removed locally and
    a notification read flag only ever flips from unread to read.
    """

    def __init__(self) -> None:
        self._claims: dict[str, Claim] = {}
        self._notifications: dict[str, Notification] = {}
        self._read_ids: set[str] = set()
        self.version = 0
        self.last_error: PortalError | None = None
        self.last_synced_at: datetime | None = None

    # -- claims --

    @property
    def claims(self) -> list[Claim]:
        """All cached claims, newest first."""
        return sorted(self._claims.values(), key=lambda c: c.created_at, reverse=True)

    def get_claim(self, claim_id: str) -> Claim | None:
        return self._claims.get(claim_id)

    def claims_by_status(self, *statuses: ClaimStatus) -> list[Claim]:
        return [c for c in self.claims if c.status in statuses]

    def upsert_claim(self, claim: Claim) -> None:
        """Overwrite the cached copy of ``claim`` (last writer wins)."""
        self._claims[claim.id] = claim
        self._touch()

    def upsert_claims(self, claims: Iterable[Claim]) -> None:
        for claim in claims:
            self._claims[claim.id] = claim
        self._touch()

    def append_pending_message(self, claim_id: str, message: ClaimMessage) -> None:
        claim = self._claims.get(claim_id)
        if claim is None:
            return
        self._claims[claim_id] = claim.model_copy(
            update={"messages": [*claim.messages, message.model_copy(update={"pending": True})]}
        )
        self._touch()

    def discard_pending_messages(self, claim_id: str) -> None:
        claim = self._claims.get(claim_id)
        if claim is None:
            return
        kept = [m for m in claim.messages if not m.pending]
        if len(kept) != len(claim.messages):
            self._claims[claim_id] = claim.model_copy(update={"messages": kept})
            self._touch()

    # -- notifications --

    @property
    def notifications(self) -> list[Notification]:
        """All notifications, newest first."""
        return sorted(self._notifications.values(), key=lambda n: n.created_at, reverse=True)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications.values() if not n.read)

    def notifications_for_claim(self, claim_id: str) -> list[Notification]:
        return [n for n in self.notifications if n.claim_id == claim_id]

    def replace_notifications(self, notifications: Iterable[Notification]) -> None:
        fresh: dict[str, Notification] = {}
        for n in notifications:
            if n.id in self._read_ids and not n.read:
                n = n.model_copy(update={"read": True})
            fresh[n.id] = n
        self._notifications = fresh
        self._touch()

    def mark_notification_read(self, notification_id: str) -> bool:
        n = self._notifications.get(notification_id)
        if n is None:
            return False
        self._read_ids.add(notification_id)
        if not n.read:
            self._notifications[notification_id] = n.model_copy(update={"read": True})
            self._touch()
        return True

    def mark_all_notifications_read(self) -> None:
        for notification_id in list(self._notifications):
            self.mark_notification_read(notification_id)

    # -- sync bookkeeping --

    def record_success(self) -> None:
        self.last_error = None
        self.last_synced_at = datetime.now(timezone.utc)

    def record_error(self, error: PortalError) -> None:
        self.last_error = error

    def _touch(self) -> None:
        self.version += 1
