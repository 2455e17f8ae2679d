"""Structured edit output: parse, chunk and format."""

from gemini_mcp.change_mode.chunker import chunk_edits, estimate_edit_size
from gemini_mcp.change_mode.formatter import format_change_mode_response, summarize_edits
from gemini_mcp.change_mode.parser import parse_change_mode_output, validate_edits

__all__ = [
    "chunk_edits",
    "estimate_edit_size",
    "format_change_mode_response",
    "parse_change_mode_output",
    "summarize_edits",
    "validate_edits",
]
