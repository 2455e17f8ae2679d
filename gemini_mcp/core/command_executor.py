"""Run external commands without a shell."""

import logging
import subprocess
import time

from gemini_mcp.core.errors import CommandExecutionError, CommandTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 600.0


def run_command(
    command: str,
    args: list[str],
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> str:
    """
    Run ``command`` with ``args`` and return its stripped stdout.

    Args:
        command: Executable name or path
        args: Argument list, passed through verbatim
        timeout_seconds: Wall-clock limit for the process

    Returns:
        Standard output of a successful run

    Raises:
        CommandExecutionError: if the process cannot be started or exits non-zero
        CommandTimeoutError: if the process exceeds ``timeout_seconds``
    """
    started = time.monotonic()
    try:
        result = subprocess.run(
            [command, *args],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout_seconds,
        )
    except subprocess.TimeoutExpired as e:
        logger.warning("Command %s timed out after %ss", command, timeout_seconds)
        raise CommandTimeoutError(command, timeout_seconds) from e
    except OSError as e:
        raise CommandExecutionError(command, f"Failed to spawn '{command}': {e}") from e

    duration = time.monotonic() - started
    logger.debug(
        "Ran %s with %d args in %.2fs (exit %d)",
        command,
        len(args),
        duration,
        result.returncode,
        extra={"command": command, "arg_count": len(args), "duration_s": round(duration, 3)},
    )

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise CommandExecutionError(
            command,
            f"Command '{command}' failed with exit code {result.returncode}: {stderr}",
            exit_code=result.returncode,
            stderr=stderr,
        )
    return result.stdout.strip()
