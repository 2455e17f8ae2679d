"""Gemini MCP Gateway Server."""

import argparse
import asyncio
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, cast

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from gemini_mcp.cache.chunk_cache import ChunkCacheManager
from gemini_mcp.core.errors import GeminiMCPError
from gemini_mcp.core.gemini_executor import GeminiExecutor
from gemini_mcp.gateway.config import GatewayConfig
from gemini_mcp.gateway.constants import DEFAULT_IDEA_COUNT, MAX_IDEA_COUNT, SERVER_NAME
from gemini_mcp.gateway.tools import AskTools, ChunkTools, UtilityTools
from gemini_mcp.logger import configure_logging

_gateway_log = logging.getLogger("gemini_mcp.gateway")


class GeminiMCPGateway:
    """Gemini MCP Gateway wiring the CLI executor, chunk cache and tool modules."""

    def __init__(self, config: GatewayConfig | None = None) -> None:
        """
        Initialize the gateway.

        Args:
            config: Gateway configuration. If None, it is read from the environment.
        """
        self.config = config or GatewayConfig.from_env()
        self.executor = GeminiExecutor(
            gemini_bin=self.config.gemini_bin,
            timeout_seconds=self.config.command_timeout_seconds,
            default_model=self.config.default_model,
        )
        self.chunk_cache = ChunkCacheManager.at(
            self.config.cache_dir,
            ttl_seconds=self.config.chunk_ttl_seconds,
            sweep_on_access=self.config.sweep_on_access,
        )
        self._init_tool_modules()

    def _init_tool_modules(self) -> None:
        self.ask_tools = AskTools(
            self.executor, self.chunk_cache, max_chunk_chars=self.config.max_chunk_chars
        )
        self.chunk_tools = ChunkTools(self.chunk_cache)
        self.utility_tools = UtilityTools(self.executor)

    def ask_gemini(
        self,
        prompt: str,
        model: str | None = None,
        sandbox: bool = False,
        change_mode: bool = False,
        chunk_index: Any = None,
        chunk_cache_key: str | None = None,
    ) -> dict[str, Any]:
        return self.ask_tools.ask_gemini(
            prompt, model, sandbox, change_mode, chunk_index, chunk_cache_key
        )

    def fetch_chunk(self, chunk_cache_key: str, chunk_index: Any) -> dict[str, Any]:
        return self.chunk_tools.fetch_chunk(chunk_cache_key, chunk_index)

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
        return self.ask_tools.brainstorm(
            prompt,
            methodology=methodology,
            domain=domain,
            constraints=constraints,
            existing_context=existing_context,
            idea_count=idea_count,
            include_analysis=include_analysis,
            model=model,
        )

    def ping(self, message: str = "pong") -> dict[str, Any]:
        return self.utility_tools.ping(message)

    def help(self) -> dict[str, Any]:
        return self.utility_tools.help()

    def cache_stats(self) -> dict[str, Any]:
        return self.chunk_tools.cache_stats()


gateway: GeminiMCPGateway | None = None
server = Server(SERVER_NAME)


def _make_tool(
    name: str,
    description: str,
    input_schema: dict[str, Any],
    annotations: dict[str, Any] | None = None,
) -> Tool:
    kwargs: dict[str, Any] = {
        "name": name,
        "description": description,
        "inputSchema": input_schema,
    }
    if annotations is not None:
        kwargs["annotations"] = annotations
        title = annotations.get("title")
        if isinstance(title, str) and title:
            kwargs["title"] = title
    return Tool(**kwargs)


_CHUNK_INDEX_SCHEMA: dict[str, Any] = {
    "type": ["integer", "string"],
    "description": "Which chunk to return (1-based); integer or numeric string",
}

_TOOL_SPECS: list[dict[str, Any]] = [
    {
        "name": "ask-gemini",
        "description": (
            "Ask Gemini through the Gemini CLI. Include files with @path. With change_mode=true, "
            "returns structured OLD/NEW edits; large edit sets are split into chunks that are "
            "fetched with chunk_cache_key and chunk_index."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "prompt": {"type": "string", "description": "Analysis request"},
                "model": {"type": "string", "description": "Model, e.g. 'gemini-2.5-flash'"},
                "sandbox": {"type": "boolean", "default": False},
                "change_mode": {"type": "boolean", "default": False},
                "chunk_index": _CHUNK_INDEX_SCHEMA,
                "chunk_cache_key": {
                    "type": "string",
                    "description": "Cache key returned with the first chunk",
                },
            },
            "required": ["prompt"],
        },
        "annotations": {
            "title": "Ask Gemini",
            "readOnlyHint": False,
            "destructiveHint": False,
            "idempotentHint": False,
            "openWorldHint": True,
        },
    },
    {
        "name": "fetch-chunk",
        "description": "Fetch the next chunk of a chunked change-mode response without re-running the prompt.",
        "input_schema": {
            "type": "object",
            "properties": {
                "chunk_cache_key": {"type": "string", "description": "Cache key"},
                "chunk_index": _CHUNK_INDEX_SCHEMA,
            },
            "required": ["chunk_cache_key", "chunk_index"],
        },
        "annotations": {
            "title": "Fetch Change Chunk",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": False,
        },
    },
    {
        "name": "brainstorm",
        "description": "Generate ideas with a creative methodology, domain context and optional feasibility analysis.",
        "input_schema": {
            "type": "object",
            "properties": {
                "prompt": {"type": "string", "description": "Brainstorming challenge"},
                "methodology": {
                    "type": "string",
                    "enum": ["divergent", "convergent", "scamper", "design-thinking", "lateral", "auto"],
                    "default": "auto",
                },
                "domain": {"type": "string"},
                "constraints": {"type": "string"},
                "existing_context": {"type": "string"},
                "idea_count": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": MAX_IDEA_COUNT,
                    "default": DEFAULT_IDEA_COUNT,
                },
                "include_analysis": {"type": "boolean", "default": True},
                "model": {"type": "string"},
            },
            "required": ["prompt"],
        },
        "annotations": {
            "title": "Brainstorm",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": False,
            "openWorldHint": True,
        },
    },
    {
        "name": "ping",
        "description": "Echo a message through a child process to check connectivity.",
        "input_schema": {
            "type": "object",
            "properties": {"message": {"type": "string", "default": "pong"}},
        },
        "annotations": {
            "title": "Ping",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": False,
        },
    },
    {
        "name": "help",
        "description": "Show Gemini CLI help and gateway usage notes.",
        "input_schema": {"type": "object", "properties": {}},
        "annotations": {
            "title": "Help",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": False,
        },
    },
    {
        "name": "cache-stats",
        "description": "Report the chunk cache entry count, location and TTL.",
        "input_schema": {"type": "object", "properties": {}},
        "annotations": {
            "title": "Chunk Cache Stats",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": False,
        },
    },
]

TOOL_SPECS: list[dict[str, Any]] = _TOOL_SPECS


@server.list_tools()
async def handle_list_tools() -> list[Tool]:
    """List available gateway tools."""
    return [
        _make_tool(
            name=str(spec["name"]),
            description=str(spec["description"]),
            input_schema=cast(dict[str, Any], spec["input_schema"]),
            annotations=cast(dict[str, Any] | None, spec.get("annotations")),
        )
        for spec in _TOOL_SPECS
    ]


_ToolHandler = Callable[[GeminiMCPGateway, dict[str, Any]], dict[str, Any]]


def _tool_to_method_name(tool_name: str) -> str:
    return tool_name.replace("-", "_")


def _tool_default_values(spec: dict[str, Any]) -> dict[str, Any]:
    input_schema = cast(dict[str, Any], spec.get("input_schema", {}))
    properties = cast(dict[str, Any], input_schema.get("properties", {}))
    defaults: dict[str, Any] = {}
    for param_name, config in properties.items():
        if isinstance(config, dict) and "default" in config:
            defaults[param_name] = config["default"]
    return defaults


def _build_handler_from_spec(spec: dict[str, Any]) -> _ToolHandler:
    method_name = _tool_to_method_name(str(spec["name"]))
    input_schema = cast(dict[str, Any], spec.get("input_schema", {}))
    properties = cast(dict[str, Any], input_schema.get("properties", {}))
    required = set(cast(list[str], input_schema.get("required", [])))
    defaults = _tool_default_values(spec)
    ordered_params = list(properties.keys())

    def handler(gateway_instance: GeminiMCPGateway, args: dict[str, Any]) -> dict[str, Any]:
        method = getattr(gateway_instance, method_name)
        call_kwargs: dict[str, Any] = {}
        for param in ordered_params:
            if param in required:
                call_kwargs[param] = args[param]
            elif param in defaults:
                call_kwargs[param] = args.get(param, defaults[param])
            else:
                call_kwargs[param] = args.get(param)
        return cast(dict[str, Any], method(**call_kwargs))

    return handler


def _build_tool_handlers() -> dict[str, _ToolHandler]:
    return {str(spec["name"]): _build_handler_from_spec(spec) for spec in _TOOL_SPECS}


_tool_handlers = _build_tool_handlers()


def _error_response(
    *,
    code: str,
    message: str,
    tool: str,
    extra: dict[str, Any] | None = None,
) -> list[TextContent]:
    payload: dict[str, Any] = {
        "success": False,
        "error": message,
        "error_code": code,
        "tool": tool,
    }
    if extra:
        payload.update(extra)
    return [TextContent(type="text", text=json.dumps(payload))]


def _serialize_tool_result(result: dict[str, Any]) -> list[TextContent]:
    return [
        TextContent(
            type="text",
            text=json.dumps(result, ensure_ascii=False, separators=(",", ":")),
        )
    ]


def _handle_tool_exception(name: str, error: Exception) -> list[TextContent]:
    if isinstance(error, KeyError):
        return _error_response(
            code="MISSING_ARGUMENT",
            message=f"Missing required argument: {error}",
            tool=name,
        )

    if isinstance(error, ValueError):
        return _error_response(
            code="INVALID_ARGUMENT",
            message=f"Invalid argument: {error}",
            tool=name,
        )

    if isinstance(error, GeminiMCPError):
        return _error_response(code=error.code, message=error.message, tool=name)

    _gateway_log.warning(
        "tool_error tool=%s error=%s",
        name,
        str(error),
        extra={"tool": name, "error": str(error)},
    )
    return _error_response(
        code="EXECUTION_ERROR",
        message=str(error),
        tool=name,
        extra={"error_type": type(error).__name__},
    )


def get_gateway() -> GeminiMCPGateway:
    global gateway
    if gateway is None:
        gateway = GeminiMCPGateway()
    return gateway


@server.call_tool()
async def handle_call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
    """Dispatch a tool call and wrap the result as a single JSON text item."""
    arguments = arguments or {}
    _gateway_log.info("tool_call tool=%s", name, extra={"tool": name})

    handler = _tool_handlers.get(name)
    if handler is None:
        return _error_response(
            code="UNKNOWN_TOOL",
            message=f"Unknown tool: {name}",
            tool=name,
            extra={"available_tools": list(_tool_handlers.keys())},
        )

    try:
        current_gateway = get_gateway()
        # CLI calls block for minutes; keep the stdio loop responsive
        result = await asyncio.to_thread(handler, current_gateway, arguments)
    except Exception as e:
        return _handle_tool_exception(name, e)
    return _serialize_tool_result(result)


async def main_stdio() -> None:
    """Run the MCP gateway server over stdio."""
    get_gateway()
    async with stdio_server() as (read_stream, write_stream):
        initialization_options = server.create_initialization_options()
        await server.run(read_stream, write_stream, initialization_options)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Gemini MCP Gateway Server (stdio)")
    parser.add_argument("--cache-dir", type=Path, help="Chunk cache directory")
    parser.add_argument("--cache-ttl", type=float, help="Chunk cache TTL in seconds")
    parser.add_argument(
        "--no-sweep-on-access",
        dest="sweep_on_access",
        action="store_false",
        default=None,
        help="Do not sweep expired entries on every store/retrieve",
    )
    parser.add_argument("--max-chunk-chars", type=int, help="Size budget for one change-mode chunk")
    parser.add_argument("--model", help="Default Gemini model")
    parser.add_argument("--timeout", type=float, help="Gemini CLI timeout in seconds")
    parser.add_argument("--gemini-bin", help="Path to the gemini executable")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-json", action="store_true", default=None, help="Log JSON lines")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    config = GatewayConfig.from_env().with_overrides(
        cache_dir=args.cache_dir,
        chunk_ttl_seconds=args.cache_ttl,
        sweep_on_access=args.sweep_on_access,
        max_chunk_chars=args.max_chunk_chars,
        default_model=args.model,
        command_timeout_seconds=args.timeout,
        gemini_bin=args.gemini_bin,
        log_level=args.log_level.upper() if args.log_level else None,
        log_json=args.log_json,
    )
    configure_logging(config.log_level, json_format=config.log_json)

    global gateway
    gateway = GeminiMCPGateway(config)
    _gateway_log.info(
        "Starting %s (cache=%s ttl=%ss)",
        SERVER_NAME,
        config.cache_dir,
        config.chunk_ttl_seconds,
    )
    asyncio.run(main_stdio())


if __name__ == "__main__":
    main()
