"""Removal of chunk sets whose time-to-live has elapsed."""

import logging
import time

from gemini_mcp.cache.chunk_store import ChunkStore
from gemini_mcp.core.errors import PersistenceFailure

logger = logging.getLogger(__name__)


class ExpirationSweeper:
    """Deletes cache entries older than a TTL.

    Safe to run from several processes at once: deletes are idempotent, an
    entry re-stored after it was listed survives the pass, and a failed delete
    is logged and skipped rather than aborting the pass.
    """

    def __init__(self, store: ChunkStore) -> None:
        self.store = store

    def sweep(self, ttl_seconds: float) -> int:
        """Delete every entry whose age exceeds ``ttl_seconds``.

        Returns:
            Number of entries removed by this pass
        """
        now = time.time()
        expired = [
            key
            for key, metadata in self.store.list_all()
            if metadata.age(now) > ttl_seconds
        ]

        removed = 0
        for key in expired:
            try:
                if self.store.delete_if_expired(key, ttl_seconds, now):
                    removed += 1
            except PersistenceFailure as e:
                logger.warning("sweep_delete_failed fingerprint=%s error=%s", key, e)

        self.store.purge_temp_files(ttl_seconds)
        if removed:
            logger.info("Swept %d expired chunk cache entries", removed)
        return removed
