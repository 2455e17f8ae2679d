"""Constants and limits for the Gemini MCP gateway."""

SERVER_NAME = "gemini-mcp-gateway"

DEFAULT_CHUNK_TTL_SECONDS = 600  # 10 minutes
DEFAULT_MAX_CHUNK_CHARS = 20_000
DEFAULT_COMMAND_TIMEOUT_SECONDS = 600
CHUNK_CACHE_DIRNAME = "gemini-mcp-chunks"

MAX_PROMPT_CHARS = 1_000_000
MAX_IDEA_COUNT = 50
DEFAULT_IDEA_COUNT = 12

ECHO_COMMAND = "echo"
