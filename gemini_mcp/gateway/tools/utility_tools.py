"""Connectivity and help tools."""

from typing import Any

from gemini_mcp.core.command_executor import run_command
from gemini_mcp.core.errors import GeminiMCPError
from gemini_mcp.core.gemini_executor import GeminiExecutor
from gemini_mcp.gateway.constants import ECHO_COMMAND
from gemini_mcp.gateway.tools.helpers import error_result

USAGE_NOTES = """\
Gateway tools:
- ask-gemini: run a prompt; include files with @path. Set change_mode=true for structured edits.
- fetch-chunk: continue a chunked change-mode response with chunk_cache_key and chunk_index.
- brainstorm: structured idea generation (methodology, domain, constraints, idea_count).
- cache-stats: entry count and location of the chunk cache.
- ping: check that the gateway can spawn processes."""


class UtilityTools:
    def __init__(self, executor: GeminiExecutor) -> None:
        self.executor = executor

    def ping(self, message: str = "pong") -> dict[str, Any]:
        """Echo ``message`` through a child process."""
        try:
            output = run_command(
                ECHO_COMMAND, [message], timeout_seconds=self.executor.timeout_seconds
            )
        except GeminiMCPError as e:
            return error_result(e, "ping")
        return {"success": True, "response": output}

    def help(self) -> dict[str, Any]:
        try:
            cli_help = run_command(
                self.executor.gemini_bin, ["-help"], timeout_seconds=self.executor.timeout_seconds
            )
        except GeminiMCPError as e:
            return error_result(e, "help", usage=USAGE_NOTES)
        return {"success": True, "response": f"{cli_help}\n\n{USAGE_NOTES}"}
