"""Invocation of the Gemini CLI."""

import logging
import os
import sys
import tempfile
from pathlib import Path

from gemini_mcp.core.command_executor import DEFAULT_TIMEOUT_SECONDS, run_command
from gemini_mcp.core.errors import CommandExecutionError, GeminiCLIError
from gemini_mcp.core.prompts import build_change_mode_prompt

logger = logging.getLogger(__name__)

GEMINI_COMMAND = "gemini"
FLASH_MODEL = "gemini-2.5-flash"
QUOTA_MARKERS = ("RESOURCE_EXHAUSTED", "Quota exceeded")
# Windows command line length limit, with headroom for the other arguments
MAX_WINDOWS_PROMPT_CHARS = 8000


def is_quota_error(error: CommandExecutionError) -> bool:
    text = f"{error.stderr}\n{error.message}"
    return any(marker in text for marker in QUOTA_MARKERS)


class GeminiExecutor:
    """Builds CLI arguments and runs ``gemini`` with a flash fallback on quota errors."""

    def __init__(
        self,
        gemini_bin: str = GEMINI_COMMAND,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        default_model: str | None = None,
    ) -> None:
        self.gemini_bin = gemini_bin
        self.timeout_seconds = timeout_seconds
        self.default_model = default_model

    def build_args(self, prompt_arg: str, model: str | None, sandbox: bool) -> list[str]:
        args: list[str] = []
        if model:
            args.extend(["-m", model])
        if sandbox:
            args.append("-s")
        args.extend(["-p", prompt_arg])
        return args

    def _run(self, prompt_arg: str, model: str | None, sandbox: bool) -> str:
        return run_command(
            self.gemini_bin,
            self.build_args(prompt_arg, model, sandbox),
            timeout_seconds=self.timeout_seconds,
        )

    def execute(
        self,
        prompt: str,
        model: str | None = None,
        sandbox: bool = False,
        change_mode: bool = False,
    ) -> str:
        """
        Run the CLI on ``prompt`` and return its output.

        Args:
            prompt: User prompt; ``@path`` includes files
            model: Model name; falls back to the configured default
            sandbox: Pass ``-s`` to run in the CLI's sandbox
            change_mode: Wrap the prompt in structured edit instructions

        Raises:
            GeminiCLIError: if the quota fallback also fails
            CommandExecutionError: for any other CLI failure
        """
        model = model or self.default_model
        processed = build_change_mode_prompt(prompt) if change_mode else prompt

        prompt_file: Path | None = None
        prompt_arg = processed
        if sys.platform == "win32" and len(processed) > MAX_WINDOWS_PROMPT_CHARS:
            prompt_file = self._write_prompt_file(processed)
            prompt_arg = f"@{prompt_file}"

        try:
            try:
                return self._run(prompt_arg, model, sandbox)
            except CommandExecutionError as e:
                if not is_quota_error(e) or model == FLASH_MODEL:
                    raise
                logger.warning(
                    "Quota exceeded for %s, retrying with %s", model or "default model", FLASH_MODEL
                )
                first_error = e

            try:
                output = self._run(prompt_arg, FLASH_MODEL, sandbox)
            except CommandExecutionError as fallback_error:
                raise GeminiCLIError(
                    f"Quota exceeded for {model or 'default model'} ({first_error.message}); "
                    f"{FLASH_MODEL} fallback also failed: {fallback_error.message}",
                    model=FLASH_MODEL,
                ) from fallback_error
            logger.info("Completed with %s fallback", FLASH_MODEL)
            return output
        finally:
            if prompt_file is not None:
                prompt_file.unlink(missing_ok=True)

    @staticmethod
    def _write_prompt_file(prompt: str) -> Path:
        # mkstemp creates the file readable by the current user only
        fd, name = tempfile.mkstemp(prefix="gemini-prompt-", suffix=".txt")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(prompt)
        logger.info("Wrote %d char prompt to %s", len(prompt), name)
        return Path(name)
