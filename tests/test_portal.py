"""Tests for settings loading and portal wiring."""

from __future__ import annotations

import pytest

from municipal_portal.core.config import Settings, SyncConfig, UploadConfig
from municipal_portal.drafts.models import DraftStep
from municipal_portal.portal import Portal, create_portal

from conftest import FakeUploader


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.api.base_url == "http://localhost:8080/api"
        assert settings.upload.max_files == 5
        assert settings.upload.max_file_bytes == 5 * 1024 * 1024
        assert settings.messaging.optimistic_echo is False

    def test_env_prefixes(self, monkeypatch):
        monkeypatch.setenv("MUNICIPAL_PORTAL_SYNC_POLL_INTERVAL_SECONDS", "30")
        monkeypatch.setenv("MUNICIPAL_PORTAL_UPLOAD_MAX_FILES", "3")
        assert SyncConfig().poll_interval_seconds == 30.0
        assert UploadConfig().max_files == 3


class TestPortal:
    def test_components_share_one_store(self, session):
        portal = Portal(Settings(), session, uploader=FakeUploader())
        assert portal.sync.store is portal.store
        assert portal.messaging.store is portal.store

    @pytest.mark.asyncio
    async def test_new_draft_and_close(self, session):
        portal = create_portal(session, Settings(), uploader=FakeUploader())
        draft = portal.new_draft()
        assert draft.step == DraftStep.BASE_INFO
        assert draft.max_files == 5
        await portal.aclose()
