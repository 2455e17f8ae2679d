"""Persistent chunk cache for oversized change-mode responses."""

from gemini_mcp.cache.chunk_cache import ChunkCacheManager, validate_chunk_sequence
from gemini_mcp.cache.chunk_store import ChunkStore
from gemini_mcp.cache.fingerprint import fingerprint, is_valid_fingerprint
from gemini_mcp.cache.sweeper import ExpirationSweeper

__all__ = [
    "ChunkCacheManager",
    "ChunkStore",
    "ExpirationSweeper",
    "fingerprint",
    "is_valid_fingerprint",
    "validate_chunk_sequence",
]
