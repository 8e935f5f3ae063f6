"""Models for the in-progress claim draft."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from municipal_portal.uploads.pipeline import StagedFile


class DraftStep(StrEnum):
    """Where a draft is in its lifecycle."""

    BASE_INFO = "base_info"
    SERVICE_FIELDS = "service_fields"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"

    @property
    def number(self) -> int:
        """Form page shown to the resident (1 or 2)."""
        return 2 if self == DraftStep.SERVICE_FIELDS else 1


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class LocationSelection(BaseModel):
    """Result of the map picker, taken as-is."""

    address: str = ""
    latitude: float | None = None
    longitude: float | None = None


class ClaimDraft(BaseModel):
    """Claim being authored. Owned by a single authoring session."""

    step: DraftStep = DraftStep.BASE_INFO
    service_id: str = ""
    title: str = ""
    description: str = ""
    location_address: str = ""
    latitude: float | None = None
    longitude: float | None = None
    priority: Priority = Priority.MEDIUM
    staged_files: list[StagedFile] = Field(default_factory=list)
    extra_field_values: dict[str, str] = Field(default_factory=dict)
