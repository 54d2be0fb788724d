"""核心业务逻辑."""

from feedvault.core.archive import ArchiveBatchSelector, ArchiveWorker
from feedvault.core.capacity import LinkCapacityGate
from feedvault.core.ingestion import IngestOutcome, RssIngestor
from feedvault.core.refresh import RefreshResult, refresh_owner_feeds
from feedvault.core.store import ArchiveTarget, PersistenceError, Store

__all__ = [
    "ArchiveBatchSelector",
    "ArchiveTarget",
    "ArchiveWorker",
    "IngestOutcome",
    "LinkCapacityGate",
    "PersistenceError",
    "RefreshResult",
    "RssIngestor",
    "Store",
    "refresh_owner_feeds",
]
