"""Gemini MCP gateway: serves Gemini CLI tools over MCP stdio."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gemini_mcp.gateway.server import GeminiMCPGateway


def __getattr__(name: str) -> Any:
    if name == "GeminiMCPGateway":
        from gemini_mcp.gateway.server import GeminiMCPGateway

        return GeminiMCPGateway
    raise AttributeError(f"module 'gemini_mcp.gateway' has no attribute '{name}'")


__all__ = ["GeminiMCPGateway"]
