"""Attachment upload pipeline."""

from municipal_portal.uploads.pipeline import (
    AttachmentPipeline,
    HttpStorageUploader,
    StagedFile,
    StorageUploader,
    UploadedAttachment,
    local_references,
    sanitize_file_name,
    validate_staged_file,
)

__all__ = [
    "AttachmentPipeline",
    "HttpStorageUploader",
    "StagedFile",
    "StorageUploader",
    "UploadedAttachment",
    "local_references",
    "sanitize_file_name",
    "validate_staged_file",
]
