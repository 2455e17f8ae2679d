"""Chunk retrieval tools for the Gemini MCP gateway."""

from typing import Any

from gemini_mcp.cache.chunk_cache import ChunkCacheManager
from gemini_mcp.change_mode.formatter import format_change_mode_response
from gemini_mcp.core.errors import GeminiMCPError
from gemini_mcp.gateway.tools.helpers import error_result, parse_chunk_index


class ChunkTools:
    """Continuation of chunked change-mode responses."""

    def __init__(self, chunk_cache: ChunkCacheManager) -> None:
        """Initialize chunk tools.

        Args:
            chunk_cache: Cache holding previously stored chunk sets
        """
        self.chunk_cache = chunk_cache

    def fetch_chunk(self, chunk_cache_key: str, chunk_index: Any) -> dict[str, Any]:
        """Return a cached chunk by key and 1-based index without re-running the prompt."""
        index = parse_chunk_index(chunk_index)
        try:
            retrieved = self.chunk_cache.retrieve(chunk_cache_key, index)
        except GeminiMCPError as e:
            return error_result(e, "fetch-chunk", chunk_cache_key=chunk_cache_key)

        chunk = retrieved.chunk
        return {
            "success": True,
            "chunk_cache_key": retrieved.fingerprint,
            "chunk_index": chunk.index,
            "total_chunks": chunk.total,
            "is_last": retrieved.is_last,
            "edit_count": len(chunk.edits),
            "response": format_change_mode_response(
                chunk.edits, chunk=chunk, cache_key=retrieved.fingerprint
            ),
        }

    def cache_stats(self) -> dict[str, Any]:
        stats = self.chunk_cache.stats()
        return {"success": True, **stats, "sweep_on_access": self.chunk_cache.sweep_on_access}
