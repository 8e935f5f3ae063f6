"""Clients for the remote claims and notifications API."""

from municipal_portal.api.claims import (
    ClaimsApi,
    CreateClaimResponse,
    SendMessagePayload,
    SendMessageResponse,
)
from municipal_portal.api.client import ApiClient
from municipal_portal.api.notifications import NotificationsApi

__all__ = [
    "ApiClient",
    "ClaimsApi",
    "CreateClaimResponse",
    "NotificationsApi",
    "SendMessagePayload",
    "SendMessageResponse",
]
