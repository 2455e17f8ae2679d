"""Tests for change-mode response formatting."""

from gemini_mcp.change_mode.formatter import format_change_mode_response, summarize_edits
from gemini_mcp.core.types import Chunk, Edit

EDITS = (
    Edit("src/a.py", "x = 1", "x = 2", 3, 3),
    Edit("src/a.py", "y = 1\nz = 1", "y = 2", 10, 11),
    Edit("src/b.py", "", "import os", 1, 1),
)


class TestFormatChangeModeResponse:
    def test_single_response_has_no_chunk_header(self) -> None:
        text = format_change_mode_response(EDITS)

        assert "Chunk" not in text
        assert "OLD:\n```\nx = 1\n```" in text
        assert "NEW:\n```\nx = 2\n```" in text
        assert "lines 10-11" in text

    def test_one_of_one_chunk_has_no_guidance(self) -> None:
        chunk = Chunk(index=1, total=1, edits=EDITS)

        text = format_change_mode_response(EDITS, chunk=chunk, cache_key=None)

        assert "chunk_index" not in text

    def test_intermediate_chunk_names_key_and_next_index(self) -> None:
        chunk = Chunk(index=1, total=3, edits=EDITS, has_more=True)

        text = format_change_mode_response(EDITS, chunk=chunk, cache_key="abc123")

        assert text.startswith("## Chunk 1 of 3")
        assert "chunk_index=2" in text
        assert 'chunk_cache_key="abc123"' in text
        assert "fetch-chunk" in text
        assert "ask-gemini" in text

    def test_final_chunk_says_so(self) -> None:
        chunk = Chunk(index=3, total=3, edits=EDITS, has_more=False)

        text = format_change_mode_response(EDITS, chunk=chunk, cache_key="abc123")

        assert "final chunk" in text
        assert "chunk_index=4" not in text


class TestSummarizeEdits:
    def test_counts_edits_per_file(self) -> None:
        summary = summarize_edits(EDITS)

        assert "3 edit(s) across 2 file(s)" in summary
        assert "`src/a.py`: 2 edit(s)" in summary
        assert "`src/b.py`: 1 edit(s)" in summary

    def test_partial_view_note(self) -> None:
        assert "chunks" in summarize_edits(EDITS, is_partial_view=True)
        assert "chunks" not in summarize_edits(EDITS, is_partial_view=False)
