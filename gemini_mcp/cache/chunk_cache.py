"""Chunk cache for oversized change-mode responses.

Every invocation of the gateway may be a fresh process, so nothing is held in
memory between calls: a chunk set is validated, keyed and written to the
``ChunkStore`` by ``store``, and ``retrieve`` reads it back from disk.
"""

import logging
import math
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from gemini_mcp.cache.chunk_store import ChunkStore
from gemini_mcp.cache.fingerprint import fingerprint as make_fingerprint
from gemini_mcp.cache.fingerprint import is_valid_fingerprint
from gemini_mcp.cache.sweeper import ExpirationSweeper
from gemini_mcp.core.errors import (
    IndexOutOfRangeError,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from gemini_mcp.core.types import CacheEntryMetadata, Chunk, RetrievedChunk

logger = logging.getLogger(__name__)


def validate_chunk_sequence(chunks: Sequence[Chunk]) -> None:
    """Check that ``chunks`` is non-empty, ordered 1..N and agrees on N.

    Raises:
        ValidationError: describing the first problem found
    """
    if not chunks:
        raise ValidationError("Cannot cache an empty chunk sequence")

    expected_total = len(chunks)
    seen: set[int] = set()
    for chunk in chunks:
        if chunk.index in seen:
            raise ValidationError(f"Duplicate chunk index {chunk.index}")
        seen.add(chunk.index)
        if chunk.total != expected_total:
            raise ValidationError(
                f"Chunk {chunk.index} declares total {chunk.total}, "
                f"but {expected_total} chunks were supplied"
            )

    missing = sorted(set(range(1, expected_total + 1)) - seen)
    if missing:
        raise ValidationError(f"Chunk indices are not contiguous: missing {missing}")

    for position, chunk in enumerate(chunks, start=1):
        if chunk.index != position:
            raise ValidationError(
                f"Chunks out of order: position {position} holds chunk {chunk.index}"
            )


class ChunkCacheManager:
    """Splits persistence from policy: the store is dumb, this class owns the rules."""

    def __init__(
        self,
        store: ChunkStore,
        ttl_seconds: float = 600.0,
        sweep_on_access: bool = True,
    ) -> None:
        """Initialize chunk cache manager.

        Args:
            store: Persistence layer for chunk sets
            ttl_seconds: Time-to-live for cache entries in seconds
            sweep_on_access: Run an expiration sweep at the start of store/retrieve
        """
        if not math.isfinite(ttl_seconds) or ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive and finite, got {ttl_seconds}")
        self.chunk_store = store
        self.ttl_seconds = ttl_seconds
        self.sweep_on_access = sweep_on_access
        self.sweeper = ExpirationSweeper(store)

    @classmethod
    def at(
        cls, root: Path, ttl_seconds: float = 600.0, sweep_on_access: bool = True
    ) -> "ChunkCacheManager":
        """Build a manager over a store rooted at ``root``."""
        return cls(
            ChunkStore(root, ttl_seconds=ttl_seconds),
            ttl_seconds=ttl_seconds,
            sweep_on_access=sweep_on_access,
        )

    def _maybe_sweep(self) -> None:
        if not self.sweep_on_access:
            return
        try:
            self.sweeper.sweep(self.ttl_seconds)
        except PersistenceFailure as e:
            logger.warning("Opportunistic sweep failed: %s", e)

    def store(
        self,
        original_input: str,
        chunks: Sequence[Chunk],
        params: Mapping[str, Any] | None = None,
    ) -> str:
        """Persist ``chunks`` and return the fingerprint that retrieves them.

        The fingerprint is only returned once the chunk set is durably on disk.

        Raises:
            ValidationError: if the chunk sequence is malformed
            PersistenceFailure: if the chunk set could not be written
        """
        validate_chunk_sequence(chunks)
        self._maybe_sweep()

        key = make_fingerprint(original_input, params)
        now = time.time()
        metadata = CacheEntryMetadata(
            fingerprint=key,
            created_at=now,
            last_accessed_at=now,
            total_chunks=len(chunks),
        )
        self.chunk_store.write(key, chunks, metadata)
        logger.info("Cached %d chunks with key %s", len(chunks), key)
        return key

    def retrieve(self, fingerprint: str, index: int) -> RetrievedChunk:
        """Return chunk ``index`` (1-based) of the set stored under ``fingerprint``.

        Raises:
            NotFoundError: if the fingerprint is unknown, malformed or expired
            IndexOutOfRangeError: if ``index`` is outside ``1..total``
            PersistenceFailure: if the store could not be read
        """
        self._maybe_sweep()

        if not is_valid_fingerprint(fingerprint):
            raise NotFoundError(fingerprint)
        chunks = self.chunk_store.read(fingerprint)
        if chunks is None:
            raise NotFoundError(fingerprint)

        total = len(chunks)
        if index < 1 or index > total:
            raise IndexOutOfRangeError(index, total)

        logger.debug("Serving cached chunk %d of %d for key %s", index, total, fingerprint)
        return RetrievedChunk(chunk=chunks[index - 1], fingerprint=fingerprint)

    def stats(self) -> dict[str, Any]:
        """Get cache statistics. Read-only.

        Returns:
            Dictionary with entry count and storage location
        """
        return {
            "entry_count": self.chunk_store.count(),
            "storage_location": str(self.chunk_store.root),
            "ttl_seconds": self.ttl_seconds,
        }
