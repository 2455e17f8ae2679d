"""Error types for the Gemini MCP gateway."""


class GeminiMCPError(Exception):
    """Base error; ``code`` is surfaced to MCP clients as ``error_code``."""

    code = "GEMINI_MCP_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(GeminiMCPError):
    """Malformed chunk sequence handed to the cache."""

    code = "VALIDATION_ERROR"


class NotFoundError(GeminiMCPError):
    """Fingerprint unknown, expired or already swept."""

    code = "CACHE_NOT_FOUND"

    def __init__(self, fingerprint: str) -> None:
        super().__init__(
            f"Chunk cache entry '{fingerprint}' expired or invalid. "
            "Re-run the original request to regenerate the edits."
        )
        self.fingerprint = fingerprint


class IndexOutOfRangeError(GeminiMCPError):
    code = "INDEX_OUT_OF_RANGE"

    def __init__(self, index: int, total: int) -> None:
        super().__init__(f"Chunk index {index} is out of range: valid indices are 1..{total}")
        self.index = index
        self.total = total


class PersistenceFailure(GeminiMCPError):
    """I/O failure while reading or writing the chunk store. Retryable."""

    code = "PERSISTENCE_FAILURE"


class CommandExecutionError(GeminiMCPError):
    code = "COMMAND_FAILED"

    def __init__(
        self,
        command: str,
        message: str,
        exit_code: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class CommandTimeoutError(CommandExecutionError):
    def __init__(self, command: str, timeout_seconds: float) -> None:
        super().__init__(command, f"Command '{command}' timed out after {timeout_seconds}s")
        self.timeout_seconds = timeout_seconds


class GeminiCLIError(GeminiMCPError):
    code = "COMMAND_FAILED"

    def __init__(self, message: str, model: str | None = None) -> None:
        super().__init__(message)
        self.model = model
