"""Claim draft authoring."""

from municipal_portal.drafts.machine import ClaimDraftMachine
from municipal_portal.drafts.models import ClaimDraft, DraftStep, LocationSelection, Priority

__all__ = [
    "ClaimDraft",
    "ClaimDraftMachine",
    "DraftStep",
    "LocationSelection",
    "Priority",
]
