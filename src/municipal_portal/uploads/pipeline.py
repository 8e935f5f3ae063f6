"""Attachment upload pipeline with a degraded local-reference fallback."""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from typing import Protocol, Sequence, runtime_checkable

import httpx
from pydantic import BaseModel, ConfigDict, Field

from municipal_portal.claims.models import ApiModel
from municipal_portal.core.config import UploadConfig
from municipal_portal.core.errors import UploadError

logger = logging.getLogger(__name__)

LOCAL_REFERENCE_SCHEME = "local://"


class StagedFile(BaseModel):
    """A file picked by the resident but not yet uploaded."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    content_type: str
    content: bytes = Field(repr=False)

    @property
    def size(self) -> int:
        return len(self.content)


class UploadedAttachment(ApiModel):
    """Where an attachment ended up, as sent in the claim payload."""

    model_config = ConfigDict(frozen=True)

    url: str
    file_name: str
    file_type: str

    @property
    def is_local(self) -> bool:
        return self.url.startswith(LOCAL_REFERENCE_SCHEME)


@runtime_checkable
class StorageUploader(Protocol):
    """Object storage collaborator: uploads one file, returns its public URL."""

    async def upload(self, file: StagedFile) -> UploadedAttachment: ...


def validate_staged_file(file: StagedFile, config: UploadConfig) -> None:
    """Reject non-image types and oversized files before any I/O.

    Raises:
        UploadError: If the file is not accepted.
    """
    if file.content_type not in config.allowed_content_types:
        raise UploadError(
            f"Invalid file type {file.content_type!r}. Only images are allowed.",
            file_name=file.file_name,
        )
    if file.size > config.max_file_bytes:
        raise UploadError(
            f"File size exceeds {config.max_file_bytes // (1024 * 1024)}MB limit",
            file_name=file.file_name,
        )


def sanitize_file_name(file_name: str) -> str:
    """Make a file name URL-safe, keeping its extension."""
    dot = file_name.rfind(".")
    name, ext = (file_name[:dot], file_name[dot:]) if dot > 0 else (file_name, "")
    name = name.lower()
    name = re.sub(r"\s+", "-", name)
    name = re.sub(r"[^a-z0-9\-_]", "", name)
    name = re.sub(r"-+", "-", name).strip("-")
    return name + ext.lower()


def local_references(files: Sequence[StagedFile]) -> list[UploadedAttachment]:
    """Non-persistent references used when the remote upload fails."""
    return [
        UploadedAttachment(
            url=f"{LOCAL_REFERENCE_SCHEME}{uuid.uuid4().hex}/{sanitize_file_name(f.file_name)}",
            file_name=f.file_name,
            file_type=f.content_type,
        )
        for f in files
    ]


class HttpStorageUploader:
    """Uploads files as multipart form data to the portal's upload endpoint."""

    def __init__(
        self,
        config: UploadConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or UploadConfig()
        self._http = http or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout_seconds),
        )

    async def upload(self, file: StagedFile) -> UploadedAttachment:
        files = {"file": (file.file_name, file.content, file.content_type)}
        try:
            resp = await self._http.post(self.config.endpoint, files=files)
        except httpx.HTTPError as exc:
            raise UploadError(f"Upload failed: {exc}", file_name=file.file_name) from exc

        if resp.is_error:
            try:
                detail = resp.json().get("error")
            except (ValueError, AttributeError):
                detail = None
            raise UploadError(detail or "Upload failed", file_name=file.file_name)

        data = resp.json()
        return UploadedAttachment(
            url=data["url"],
            file_name=data.get("fileName", file.file_name),
            file_type=data.get("fileType", file.content_type),
        )

    async def close(self) -> None:
        await self._http.aclose()


class AttachmentPipeline:
    """Uploads a batch of staged files concurrently.

    The output preserves input order. Any failing file fails the whole
    batch with ``UploadError``.
    """

    def __init__(self, uploader: StorageUploader, config: UploadConfig | None = None) -> None:
        self._uploader = uploader
        self.config = config or UploadConfig()

    async def upload(self, files: Sequence[StagedFile]) -> list[UploadedAttachment]:
        if not files:
            return []
        for f in files:
            validate_staged_file(f, self.config)

        results = await asyncio.gather(
            *(self._uploader.upload(f) for f in files),
            return_exceptions=True,
        )
        for f, result in zip(files, results):
            if isinstance(result, UploadError):
                raise result
            if isinstance(result, Exception):
                raise UploadError(f"Upload failed: {result}", file_name=f.file_name) from result
        logger.info("attachments uploaded: %d file(s)", len(results))
        return list(results)

    async def upload_or_fallback(
        self, files: Sequence[StagedFile]
    ) -> tuple[list[UploadedAttachment], bool]:
        """Upload ``files``, falling back to local references on failure.

        Returns the attachments and whether the degraded fallback was used.
        """
        try:
            return await self.upload(files), False
        except UploadError as exc:
            logger.warning(
                "attachment upload degraded: using local references for %d file(s) (%s: %s)",
                len(files), exc.file_name, exc,
            )
            return local_references(files), True
