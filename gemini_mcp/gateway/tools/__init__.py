"""Gemini MCP gateway tool modules."""

from gemini_mcp.gateway.tools.ask_tools import AskTools
from gemini_mcp.gateway.tools.chunk_tools import ChunkTools
from gemini_mcp.gateway.tools.utility_tools import UtilityTools

__all__ = [
    "AskTools",
    "ChunkTools",
    "UtilityTools",
]
