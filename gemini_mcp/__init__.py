"""Gemini MCP gateway: exposes the Gemini CLI as MCP tools."""

__version__ = "0.3.0"
