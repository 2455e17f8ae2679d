"""Helper functions for gateway tools."""

from typing import Any

from gemini_mcp.core.errors import GeminiMCPError


def parse_chunk_index(value: Any) -> int:
    """Accept an int or a numeric string; anything else is rejected."""
    if isinstance(value, bool):
        raise ValueError("chunk_index must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("+-").isdigit():
        return int(value.strip())
    raise ValueError(f"chunk_index must be an integer, got {value!r}")


def error_result(error: GeminiMCPError, tool: str, **extra: Any) -> dict[str, Any]:
    """Tool-level failure payload for a gateway error."""
    result: dict[str, Any] = {
        "success": False,
        "error": error.message,
        "error_code": error.code,
        "tool": tool,
    }
    result.update(extra)
    return result
