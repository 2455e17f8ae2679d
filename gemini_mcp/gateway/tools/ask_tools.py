"""Gemini CLI tools: ask-gemini and brainstorm."""

import logging
from typing import Any

from gemini_mcp.cache.chunk_cache import ChunkCacheManager
from gemini_mcp.change_mode.chunker import chunk_edits
from gemini_mcp.change_mode.formatter import (
    format_change_mode_response,
    should_summarize,
    summarize_edits,
)
from gemini_mcp.change_mode.parser import parse_change_mode_output, validate_edits
from gemini_mcp.core.errors import GeminiMCPError
from gemini_mcp.core.gemini_executor import GeminiExecutor
from gemini_mcp.core.prompts import METHODOLOGY_NAMES, build_brainstorm_prompt
from gemini_mcp.gateway.constants import (
    DEFAULT_IDEA_COUNT,
    DEFAULT_MAX_CHUNK_CHARS,
    MAX_IDEA_COUNT,
    MAX_PROMPT_CHARS,
)
from gemini_mcp.gateway.tools.helpers import error_result, parse_chunk_index

logger = logging.getLogger(__name__)

NO_EDITS_MESSAGE = (
    "No structured edits were found in Gemini's response. "
    "The raw output is shown below."
)


def _require_prompt(prompt: str) -> str:
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValueError(
            "Please provide a prompt. Use @ syntax to include files "
            "(e.g. '@src/main.py explain what this does')."
        )
    if len(prompt) > MAX_PROMPT_CHARS:
        raise ValueError(f"Prompt exceeds {MAX_PROMPT_CHARS} characters")
    return prompt


class AskTools:
    """Tools that run a prompt through the Gemini CLI."""

    def __init__(
        self,
        executor: GeminiExecutor,
        chunk_cache: ChunkCacheManager,
        max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS,
    ) -> None:
        """Initialize ask tools.

        Args:
            executor: Gemini CLI executor
            chunk_cache: Cache for oversized change-mode responses
            max_chunk_chars: Size budget for a single change-mode chunk
        """
        self.executor = executor
        self.chunk_cache = chunk_cache
        self.max_chunk_chars = max_chunk_chars

    def ask_gemini(
        self,
        prompt: str,
        model: str | None = None,
        sandbox: bool = False,
        change_mode: bool = False,
        chunk_index: Any = None,
        chunk_cache_key: str | None = None,
    ) -> dict[str, Any]:
        """Run a prompt through the CLI; in change mode, return structured edits."""
        prompt = _require_prompt(prompt)
        requested_index = parse_chunk_index(chunk_index) if chunk_index is not None else None

        if change_mode and requested_index is not None and chunk_cache_key:
            return self._serve_cached_chunk(chunk_cache_key, requested_index)

        try:
            output = self.executor.execute(
                prompt, model=model, sandbox=sandbox, change_mode=change_mode
            )
        except GeminiMCPError as e:
            return error_result(e, "ask-gemini")

        if not change_mode:
            return {"success": True, "response": output, "model": model or self.executor.default_model}

        return self._process_change_mode_output(output, prompt, model, sandbox, requested_index)

    def _serve_cached_chunk(self, chunk_cache_key: str, index: int) -> dict[str, Any]:
        try:
            retrieved = self.chunk_cache.retrieve(chunk_cache_key, index)
        except GeminiMCPError as e:
            return error_result(e, "ask-gemini", chunk_cache_key=chunk_cache_key)

        chunk = retrieved.chunk
        logger.debug("Serving chunk %d of %d from cache", chunk.index, chunk.total)
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

    def _process_change_mode_output(
        self,
        output: str,
        prompt: str,
        model: str | None,
        sandbox: bool,
        requested_index: int | None,
    ) -> dict[str, Any]:
        edits = parse_change_mode_output(output)
        if not edits:
            return {
                "success": True,
                "edit_count": 0,
                "response": f"{NO_EDITS_MESSAGE}\n\n{output}",
            }

        problems = validate_edits(edits)
        if problems:
            return {
                "success": False,
                "error": "Edit validation failed:\n" + "\n".join(problems),
                "error_code": "VALIDATION_ERROR",
                "tool": "ask-gemini",
                "validation_errors": problems,
            }

        chunks = chunk_edits(edits, max_chars=self.max_chunk_chars)
        cache_key: str | None = None
        if len(chunks) > 1:
            try:
                cache_key = self.chunk_cache.store(
                    prompt, chunks, params={"model": model, "sandbox": sandbox}
                )
            except GeminiMCPError as e:
                return error_result(e, "ask-gemini")

        index = requested_index if requested_index and 1 <= requested_index <= len(chunks) else 1
        chunk = chunks[index - 1]
        response = format_change_mode_response(chunk.edits, chunk=chunk, cache_key=cache_key)
        if index == 1 and should_summarize(len(edits)):
            response = summarize_edits(edits, is_partial_view=len(chunks) > 1) + "\n\n" + response

        logger.debug(
            "Change mode: %d edits in %d chunks, returning chunk %d",
            len(edits),
            len(chunks),
            index,
        )
        return {
            "success": True,
            "chunk_cache_key": cache_key,
            "chunk_index": index,
            "total_chunks": len(chunks),
            "is_last": index == len(chunks),
            "edit_count": len(edits),
            "response": response,
        }

    def brainstorm(
        self,
        prompt: str,
        methodology: str = "auto",
        domain: str | None = None,
        constraints: str | None = None,
        existing_context: str | None = None,
        idea_count: int = DEFAULT_IDEA_COUNT,
        include_analysis: bool = True,
        model: str | None = None,
    ) -> dict[str, Any]:
        """Run a structured brainstorming prompt."""
        prompt = _require_prompt(prompt)
        if methodology not in METHODOLOGY_NAMES:
            raise ValueError(
                f"Unknown methodology {methodology!r}; expected one of {', '.join(METHODOLOGY_NAMES)}"
            )
        if isinstance(idea_count, bool) or not isinstance(idea_count, int):
            raise ValueError("idea_count must be an integer")
        if not 1 <= idea_count <= MAX_IDEA_COUNT:
            raise ValueError(f"idea_count must be between 1 and {MAX_IDEA_COUNT}")

        enhanced = build_brainstorm_prompt(
            prompt,
            methodology=methodology,
            domain=domain,
            constraints=constraints,
            existing_context=existing_context,
            idea_count=idea_count,
            include_analysis=include_analysis,
        )
        logger.debug("Brainstorm: methodology=%s domain=%s", methodology, domain or "general")
        try:
            output = self.executor.execute(enhanced, model=model)
        except GeminiMCPError as e:
            return error_result(e, "brainstorm")
        return {
            "success": True,
            "methodology": methodology,
            "idea_count": idea_count,
            "response": output,
        }
