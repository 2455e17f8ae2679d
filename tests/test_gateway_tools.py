"""Tests for gateway tool modules."""

from pathlib import Path
from typing import Any

import pytest

from gemini_mcp.cache.chunk_cache import ChunkCacheManager
from gemini_mcp.core.errors import CommandExecutionError, PersistenceFailure
from gemini_mcp.core.gemini_executor import GeminiExecutor
from gemini_mcp.gateway.tools import AskTools, ChunkTools, UtilityTools
from gemini_mcp.gateway.tools.helpers import parse_chunk_index


def _change_mode_output(file_count: int, body_size: int = 10) -> str:
    blocks = []
    for i in range(file_count):
        old = "o" * body_size
        new = "n" * body_size
        blocks.append(f"**FILE: src/file_{i}.py:{i + 1}**\n```\nOLD:\n{old}\nNEW:\n{new}\n```\n")
    return "\n".join(blocks)


class _StubExecutor(GeminiExecutor):
    def __init__(self, outputs: list[Any]) -> None:
        super().__init__(default_model="gemini-2.5-pro")
        self.outputs = list(outputs)
        self.calls: list[dict[str, Any]] = []

    def execute(
        self,
        prompt: str,
        model: str | None = None,
        sandbox: bool = False,
        change_mode: bool = False,
    ) -> str:
        self.calls.append(
            {"prompt": prompt, "model": model, "sandbox": sandbox, "change_mode": change_mode}
        )
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


def _ask_tools(tmp_path: Path, outputs: list[Any], max_chunk_chars: int = 20_000) -> AskTools:
    cache = ChunkCacheManager.at(tmp_path)
    return AskTools(_StubExecutor(outputs), cache, max_chunk_chars=max_chunk_chars)


class TestParseChunkIndex:
    def test_accepts_int_and_numeric_string(self) -> None:
        assert parse_chunk_index(2) == 2
        assert parse_chunk_index(" 3 ") == 3

    @pytest.mark.parametrize("value", ["two", "", 1.5, None, True, [1]])
    def test_rejects_everything_else(self, value: Any) -> None:
        with pytest.raises(ValueError):
            parse_chunk_index(value)


class TestAskGemini:
    def test_plain_prompt_returns_response(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, ["Gemini says hi"])

        result = tools.ask_gemini("hello")

        assert result == {"success": True, "response": "Gemini says hi", "model": "gemini-2.5-pro"}

    def test_blank_prompt_is_invalid(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, [])

        with pytest.raises(ValueError):
            tools.ask_gemini("   ")

    def test_cli_failure_becomes_error_result(self, tmp_path: Path) -> None:
        error = CommandExecutionError("gemini", "gemini exited 1", exit_code=1)
        tools = _ask_tools(tmp_path, [error])

        result = tools.ask_gemini("hello")

        assert result["success"] is False
        assert result["error_code"] == "COMMAND_FAILED"
        assert result["tool"] == "ask-gemini"

    def test_small_change_set_is_returned_inline(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, [_change_mode_output(2)])

        result = tools.ask_gemini("refactor @src", change_mode=True)

        assert result["success"] is True
        assert result["total_chunks"] == 1
        assert result["chunk_cache_key"] is None
        assert "src/file_0.py" in result["response"]
        assert tools.chunk_cache.stats()["entry_count"] == 0

    def test_large_change_set_is_cached_and_continued(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, [_change_mode_output(6, body_size=400)], max_chunk_chars=1200)

        first = tools.ask_gemini("refactor @src", change_mode=True)

        assert first["success"] is True
        assert first["chunk_index"] == 1
        assert first["total_chunks"] > 1
        key = first["chunk_cache_key"]
        assert key
        assert f'chunk_cache_key="{key}"' in first["response"]
        assert "Summary: 6 edit(s)" in first["response"]

        second = tools.ask_gemini("refactor @src", change_mode=True, chunk_index="2", chunk_cache_key=key)

        assert second["success"] is True
        assert second["chunk_index"] == 2
        assert len(tools.executor.calls) == 1

    def test_store_uses_model_and_sandbox_params(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, [_change_mode_output(6, body_size=400)] * 2, max_chunk_chars=1200)

        pro = tools.ask_gemini("p", model="gemini-2.5-pro", change_mode=True)
        sandboxed = tools.ask_gemini("p", model="gemini-2.5-pro", sandbox=True, change_mode=True)

        assert pro["chunk_cache_key"] != sandboxed["chunk_cache_key"]

    def test_expired_key_reports_not_found(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, [])

        result = tools.ask_gemini("p", change_mode=True, chunk_index=2, chunk_cache_key="0" * 32)

        assert result["success"] is False
        assert result["error_code"] == "CACHE_NOT_FOUND"
        assert "re-run" in result["error"].lower()
        assert tools.executor.calls == []

    def test_persistence_failure_fails_the_tool(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        tools = _ask_tools(tmp_path, [_change_mode_output(6, body_size=400)], max_chunk_chars=1200)

        def failing_write(*args: Any, **kwargs: Any) -> None:
            raise PersistenceFailure("disk full")

        monkeypatch.setattr(tools.chunk_cache.chunk_store, "write", failing_write)

        result = tools.ask_gemini("p", change_mode=True)

        assert result["success"] is False
        assert result["error_code"] == "PERSISTENCE_FAILURE"
        assert "chunk_cache_key" not in result

    def test_output_without_edits_returns_raw_text(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, ["Nothing to change."])

        result = tools.ask_gemini("p", change_mode=True)

        assert result["success"] is True
        assert result["edit_count"] == 0
        assert result["response"].endswith("Nothing to change.")

    def test_invalid_edits_are_reported(self, tmp_path: Path) -> None:
        output = "**FILE: a.py:1**\n```\nOLD:\nsame\nNEW:\nsame\n```\n"
        tools = _ask_tools(tmp_path, [output])

        result = tools.ask_gemini("p", change_mode=True)

        assert result["success"] is False
        assert result["error_code"] == "VALIDATION_ERROR"
        assert result["validation_errors"]


class TestBrainstorm:
    def test_builds_structured_prompt(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, ["ideas"])

        result = tools.brainstorm(
            "new onboarding flow", methodology="scamper", domain="product", idea_count=5
        )

        assert result["success"] is True
        sent = tools.executor.calls[0]["prompt"]
        assert "new onboarding flow" in sent
        assert "SCAMPER" in sent
        assert "Generate 5 distinct" in sent
        assert "**Domain Focus:** product" in sent

    def test_unknown_methodology_is_invalid(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, [])

        with pytest.raises(ValueError):
            tools.brainstorm("x", methodology="telepathy")

    def test_idea_count_is_bounded(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, [])

        with pytest.raises(ValueError):
            tools.brainstorm("x", idea_count=0)

    def test_analysis_can_be_disabled(self, tmp_path: Path) -> None:
        tools = _ask_tools(tmp_path, ["ideas"])

        tools.brainstorm("x", include_analysis=False)

        assert "Feasibility" not in tools.executor.calls[0]["prompt"]


class TestChunkTools:
    def test_fetch_chunk_and_stats(self, tmp_path: Path) -> None:
        ask = _ask_tools(tmp_path, [_change_mode_output(6, body_size=400)], max_chunk_chars=1200)
        key = ask.ask_gemini("refactor @src", change_mode=True)["chunk_cache_key"]
        total = ask.chunk_cache.retrieve(key, 1).chunk.total
        tools = ChunkTools(ChunkCacheManager.at(tmp_path))

        last = tools.fetch_chunk(key, total)

        assert last["success"] is True
        assert last["is_last"] is True
        assert last["total_chunks"] == total
        assert "final chunk" in last["response"]

        stats = tools.cache_stats()
        assert stats["entry_count"] == 1
        assert stats["storage_location"] == str(tmp_path)

    def test_fetch_out_of_range(self, tmp_path: Path) -> None:
        ask = _ask_tools(tmp_path, [_change_mode_output(6, body_size=400)], max_chunk_chars=1200)
        key = ask.ask_gemini("refactor @src", change_mode=True)["chunk_cache_key"]

        result = ChunkTools(ask.chunk_cache).fetch_chunk(key, 99)

        assert result["error_code"] == "INDEX_OUT_OF_RANGE"


class TestUtilityTools:
    def test_ping_echoes_message(self) -> None:
        result = UtilityTools(GeminiExecutor()).ping("hello there")

        assert result == {"success": True, "response": "hello there"}

    def test_help_reports_missing_cli(self) -> None:
        tools = UtilityTools(GeminiExecutor(gemini_bin="definitely-not-a-real-gemini-xyz"))

        result = tools.help()

        assert result["success"] is False
        assert result["error_code"] == "COMMAND_FAILED"
        assert "fetch-chunk" in result["usage"]
