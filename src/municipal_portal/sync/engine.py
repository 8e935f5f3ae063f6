"""Polling synchronization of claims and notifications with the backend."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from municipal_portal.api.claims import ClaimsApi
from municipal_portal.api.notifications import NotificationsApi
from municipal_portal.auth.session import SessionProvider, require_token
from municipal_portal.claims.models import Claim
from municipal_portal.core.config import SyncConfig
from municipal_portal.core.errors import PortalError
from municipal_portal.sync.store import ClaimsStore

logger = logging.getLogger(__name__)


class SyncEngine:
    """Keeps a ClaimsStore aligned with the backend by polling.

    A full refresh requested while another is in flight is dropped, not
    queued; the next tick catches up. Per-claim refreshes run independently
    and overwrite the cached claim. A failed refresh leaves the cache as it
    was and is recorded on ``store.last_error``.
    """

    def __init__(
        self,
        claims_api: ClaimsApi,
        notifications_api: NotificationsApi,
        session: SessionProvider,
        store: ClaimsStore | None = None,
        config: SyncConfig | None = None,
    ) -> None:
        self._claims_api = claims_api
        self._notifications_api = notifications_api
        self._session = session
        self.store = store or ClaimsStore()
        self.config = config or SyncConfig()
        self._refreshing = False
        self._poll_task: asyncio.Task | None = None
        self._claim_tasks: dict[str, asyncio.Task] = {}
        self.consecutive_failures = 0

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    @property
    def is_running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    # -- refresh operations --------------------------------------------------

    async def refresh(self) -> bool:
        """Refetch all claims and notifications.

        Returns False when the call was coalesced into an in-flight refresh.

        Raises:
            AuthError: If no session token is available.
            RemoteError: If the backend request fails.
        """
        if self._refreshing:
            logger.debug("Refresh already in flight; request dropped")
            return False

        self._refreshing = True
        try:
            token = await require_token(self._session)
            claims = await self._claims_api.list_claims(token)
            notifications = await self._notifications_api.list_notifications(token)
        except PortalError as exc:
            self._record_failure(exc)
            raise
        finally:
            self._refreshing = False

        self.store.upsert_claims(claims)
        self.store.replace_notifications(notifications)
        self.store.record_success()
        self.consecutive_failures = 0
        return True

    async def refresh_claim_by_id(self, claim_id: str) -> Claim:
        """Refetch one claim, including its messages, and overwrite the cache."""
        try:
            token = await require_token(self._session)
            claim = await self._claims_api.get_claim(claim_id, token)
        except PortalError as exc:
            self.store.record_error(exc)
            raise
        self.store.upsert_claim(claim)
        return claim

    async def mark_notification_read(self, notification_id: str) -> None:
        token = await require_token(self._session)
        await self._notifications_api.mark_read(notification_id, token)
        self.store.mark_notification_read(notification_id)

    async def mark_all_notifications_read(self) -> None:
        token = await require_token(self._session)
        await self._notifications_api.mark_all_read(token)
        self.store.mark_all_notifications_read()

    # -- polling -------------------------------------------------------------

    def next_delay(self) -> float:
        """Seconds until the next tick, backing off after repeated failures."""
        interval = self.config.poll_interval_seconds
        if self.consecutive_failures == 0:
            return interval
        return min(interval * 2 ** self.consecutive_failures, self.config.max_backoff_seconds)

    def start(self) -> None:
        """Start the polling loop. Refreshes immediately, then on every tick."""
        if self.is_running:
            return
        self._poll_task = asyncio.create_task(self._poll_loop())

    def watch_claim(self, claim_id: str) -> None:
        """Poll a single claim (detail view) until ``unwatch_claim``."""
        task = self._claim_tasks.get(claim_id)
        if task is not None and not task.done():
            return
        self._claim_tasks[claim_id] = asyncio.create_task(self._claim_loop(claim_id))

    async def unwatch_claim(self, claim_id: str) -> None:
        task = self._claim_tasks.pop(claim_id, None)
        if task is not None:
            await _cancel(task)

    async def stop(self) -> None:
        tasks = list(self._claim_tasks.values())
        self._claim_tasks.clear()
        if self._poll_task is not None:
            tasks.append(self._poll_task)
            self._poll_task = None
        for task in tasks:
            await _cancel(task)

    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.refresh()
            except PortalError:
                pass  # recorded and logged by refresh()
            await asyncio.sleep(self.next_delay())

    async def _claim_loop(self, claim_id: str) -> None:
        while True:
            try:
                await self.refresh_claim_by_id(claim_id)
            except PortalError as exc:
                logger.warning("Refresh of claim %s failed: %s", claim_id, exc)
            await asyncio.sleep(self.config.claim_poll_interval_seconds)

    def _record_failure(self, exc: PortalError) -> None:
        self.consecutive_failures += 1
        self.store.record_error(exc)
        logger.warning(
            "Claims refresh failed (%d in a row), next attempt in %.0fs: %s",
            self.consecutive_failures, self.next_delay(), exc,
        )


async def _cancel(task: asyncio.Task) -> None:
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
