"""Claims and notifications synchronization layer."""

from municipal_portal.sync.engine import SyncEngine
from municipal_portal.sync.store import ClaimsStore

__all__ = ["ClaimsStore", "SyncEngine"]
