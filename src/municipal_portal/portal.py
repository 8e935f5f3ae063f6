"""Wiring of the portal core components from settings."""

from __future__ import annotations

from municipal_portal.api.claims import ClaimsApi
from municipal_portal.api.client import ApiClient
from municipal_portal.api.notifications import NotificationsApi
from municipal_portal.auth.session import SessionProvider
from municipal_portal.claims.submission import ClaimSubmission
from municipal_portal.core.config import Settings, configure_logging
from municipal_portal.drafts.machine import ClaimDraftMachine
from municipal_portal.messaging.service import MessagingService
from municipal_portal.services.registry import ServiceRegistry, default_registry
from municipal_portal.sync.engine import SyncEngine
from municipal_portal.sync.store import ClaimsStore
from municipal_portal.uploads.pipeline import AttachmentPipeline, HttpStorageUploader, StorageUploader


class Portal:
    """One resident session: shared claim state plus the services acting on it."""

    def __init__(
        self,
        settings: Settings,
        session: SessionProvider,
        registry: ServiceRegistry | None = None,
        uploader: StorageUploader | None = None,
        api_client: ApiClient | None = None,
    ) -> None:
        self.settings = settings
        self.session = session
        self.registry = registry or default_registry()
        self.store = ClaimsStore()

        self._api_client = api_client or ApiClient(settings.api)
        self.claims_api = ClaimsApi(self._api_client)
        self.notifications_api = NotificationsApi(self._api_client)
        self._uploader = uploader or HttpStorageUploader(settings.upload)
        self.pipeline = AttachmentPipeline(self._uploader, settings.upload)

        self.sync = SyncEngine(
            self.claims_api, self.notifications_api, session, self.store, settings.sync
        )
        self.submission = ClaimSubmission(self.claims_api, session, self.registry)
        self.messaging = MessagingService(
            self.claims_api, session, self.sync, settings.messaging
        )

    def new_draft(self) -> ClaimDraftMachine:
        return ClaimDraftMachine(self.registry, self.pipeline, self.submission, self.sync)

    async def aclose(self) -> None:
        await self.sync.stop()
        await self._api_client.close()
        if isinstance(self._uploader, HttpStorageUploader):
            await self._uploader.close()


def create_portal(
    session: SessionProvider,
    settings: Settings | None = None,
    **kwargs,
) -> Portal:
    """Build a Portal from settings (environment by default) and configure logging."""
    settings = settings or Settings()
    configure_logging(settings)
    return Portal(settings, session, **kwargs)
