"""Notifications endpoints of the remote backend."""

from __future__ import annotations

import logging

from municipal_portal.api.client import ApiClient, parse_response
from municipal_portal.claims.models import Notification
from municipal_portal.core.errors import RemoteError

logger = logging.getLogger(__name__)


class NotificationsApi:
    """``/notifications`` resource client."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_notifications(self, token: str) -> list[Notification]:
        """Fetch the user's notifications.

        Deployments without the notifications endpoint answer 404; that is
        reported as an empty list so a claims refresh still succeeds.
        """
        try:
            data = await self._client.request("GET", "/notifications", token)
        except RemoteError as exc:
            if exc.not_found:
                logger.debug("Notifications endpoint missing; using empty list")
                return []
            raise
        return [parse_response(Notification, item) for item in data or []]

    async def mark_read(self, notification_id: str, token: str) -> None:
        await self._client.request("PATCH", f"/notifications/{notification_id}/read", token)

    async def mark_all_read(self, token: str) -> None:
        await self._client.request("PATCH", "/notifications/read-all", token)
