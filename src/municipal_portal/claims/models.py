"""Claim, message and notification models mirroring the backend's JSON."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model that reads and writes the backend's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClaimStatus(StrEnum):
    SUBMITTED = "submitted"
    RECEIVED = "received"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    PENDING_INFO = "pending_info"
    RESOLVED = "resolved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (ClaimStatus.RESOLVED, ClaimStatus.REJECTED)


# Statuses older backends still send.
LEGACY_STATUSES: dict[str, ClaimStatus] = {
    "pending": ClaimStatus.SUBMITTED,
    "closed": ClaimStatus.RESOLVED,
}

STATUS_LABELS: dict[ClaimStatus, str] = {
    ClaimStatus.SUBMITTED: "En Révision",
    ClaimStatus.RECEIVED: "En Révision",
    ClaimStatus.ASSIGNED: "En Cours",
    ClaimStatus.IN_PROGRESS: "En Cours",
    ClaimStatus.PENDING_INFO: "En Révision",
    ClaimStatus.RESOLVED: "Résolue",
    ClaimStatus.REJECTED: "Rejetée",
}


class SenderRole(StrEnum):
    CITIZEN = "citizen"
    SERVICE = "service"


class MessageAttachment(ApiModel):
    url: str
    file_name: str = ""
    file_type: str = ""


class ClaimMessage(ApiModel):
    """A single message in a claim's conversation. Never edited once created."""

    id: str
    claim_id: str
    sender_id: str = ""
    sender_name: str = ""
    sender_role: SenderRole = Field(
        default=SenderRole.CITIZEN,
        validation_alias=AliasChoices("senderRole", "senderType", "sender_role"),
    )
    content: str
    timestamp: datetime
    attachments: list[MessageAttachment] = Field(default_factory=list)
    # Local placeholder awaiting the authoritative copy from the backend.
    pending: bool = Field(default=False, exclude=True)


class Assignment(ApiModel):
    operator_id: str
    operator_name: str = ""


class Resolution(ApiModel):
    summary: str = ""
    actions_taken: list[str] = Field(default_factory=list)
    closing_message: str = ""


class Claim(ApiModel):
    """Local cached copy of a backend claim."""

    id: str
    claim_number: str | None = None
    user_id: str = ""
    service_type: str = ""
    service_name: str = ""
    title: str = ""
    description: str = ""
    location: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    priority: str = "medium"
    attachment_urls: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("attachmentUrls", "images", "attachment_urls"),
    )
    extra_data: dict[str, str] = Field(default_factory=dict)
    status: ClaimStatus = ClaimStatus.SUBMITTED
    assigned_to: Assignment | None = None
    resolution: Resolution | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    messages: list[ClaimMessage] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _map_legacy_status(cls, value):
        if isinstance(value, str):
            return LEGACY_STATUSES.get(value, value)
        return value

    @field_validator("extra_data", mode="before")
    @classmethod
    def _stringify_extra(cls, value):
        if isinstance(value, dict):
            return {k: "" if v is None else str(v) for k, v in value.items()}
        return value

    @field_validator("messages")
    @classmethod
    def _order_messages(cls, value: list[ClaimMessage]) -> list[ClaimMessage]:
        return sorted(value, key=lambda m: m.timestamp)

    @property
    def is_closed(self) -> bool:
        return self.status.is_terminal

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]


class NotificationKind(StrEnum):
    STATUS_CHANGE = "status_change"
    NEW_MESSAGE = "new_message"


class Notification(ApiModel):
    id: str
    user_id: str = ""
    claim_id: str = ""
    kind: NotificationKind = Field(
        default=NotificationKind.STATUS_CHANGE,
        validation_alias=AliasChoices("kind", "type"),
    )
    title: str = ""
    message: str = ""
    read: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
