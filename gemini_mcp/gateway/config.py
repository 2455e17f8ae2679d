"""Environment-driven configuration for the gateway."""

import math
import os
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path

from dotenv import load_dotenv

from gemini_mcp.gateway.constants import (
    CHUNK_CACHE_DIRNAME,
    DEFAULT_CHUNK_TTL_SECONDS,
    DEFAULT_COMMAND_TIMEOUT_SECONDS,
    DEFAULT_MAX_CHUNK_CHARS,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _default_cache_dir() -> Path:
    return Path(tempfile.gettempdir()) / CHUNK_CACHE_DIRNAME


def _env_number(name: str, default: float, parse: type = float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class GatewayConfig:
    cache_dir: Path = field(default_factory=_default_cache_dir)
    chunk_ttl_seconds: float = DEFAULT_CHUNK_TTL_SECONDS
    sweep_on_access: bool = True
    max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS
    default_model: str | None = None
    command_timeout_seconds: float = DEFAULT_COMMAND_TIMEOUT_SECONDS
    gemini_bin: str = "gemini"
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self) -> None:
        if not math.isfinite(self.chunk_ttl_seconds) or self.chunk_ttl_seconds <= 0:
            raise ValueError(
                f"Chunk TTL must be positive and finite, got {self.chunk_ttl_seconds}"
            )
        if self.max_chunk_chars <= 0:
            raise ValueError(f"Max chunk chars must be positive, got {self.max_chunk_chars}")
        if not math.isfinite(self.command_timeout_seconds) or self.command_timeout_seconds <= 0:
            raise ValueError(
                f"Command timeout must be positive and finite, got {self.command_timeout_seconds}"
            )

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """Build a config from ``GEMINI_MCP_*`` variables, reading ``.env`` first."""
        load_dotenv()
        cache_dir = os.getenv("GEMINI_MCP_CHUNK_CACHE_DIR")
        return cls(
            cache_dir=Path(cache_dir).expanduser() if cache_dir else _default_cache_dir(),
            chunk_ttl_seconds=_env_number("GEMINI_MCP_CHUNK_TTL", DEFAULT_CHUNK_TTL_SECONDS),
            sweep_on_access=_env_bool("GEMINI_MCP_SWEEP_ON_ACCESS", True),
            max_chunk_chars=int(
                _env_number("GEMINI_MCP_MAX_CHUNK_CHARS", DEFAULT_MAX_CHUNK_CHARS, parse=int)
            ),
            default_model=os.getenv("GEMINI_MCP_DEFAULT_MODEL") or None,
            command_timeout_seconds=_env_number(
                "GEMINI_MCP_TIMEOUT", DEFAULT_COMMAND_TIMEOUT_SECONDS
            ),
            gemini_bin=os.getenv("GEMINI_MCP_GEMINI_BIN") or "gemini",
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
            log_json=(os.getenv("LOG_FORMAT") or "").strip().lower() == "json",
        )

    def with_overrides(self, **overrides: object) -> "GatewayConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
