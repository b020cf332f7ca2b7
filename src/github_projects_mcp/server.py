"""MCP server wiring for github-projects-mcp.

Exposes every declared tool, the sprint-planning prompts and two read-only
resources over stdio.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

try:
    from mcp.server import Server
    from mcp.types import GetPromptResult, Prompt, Resource, TextContent, Tool
except ImportError as exc:  # pragma: no cover
    raise ImportError("MCP library not installed. Install with: pip install mcp") from exc

from . import __version__
from .errors import SafeError, ToolCallError
from .prompts import PROMPT_SPECS_BY_NAME, list_prompt_definitions, render_prompt
from .tools import TOOL_METADATA, dispatch_tool, initialize_runtime_from_env

SERVER_NAME = "github-projects-mcp"
STATUS_URI = "github-projects-mcp://server-status"
CAPABILITIES_URI = "github-projects-mcp://capabilities"


def _log_level() -> int:
    environment = (os.getenv("GITHUB_MCP_ENV") or "development").strip().lower()
    return logging.DEBUG if environment == "development" else logging.INFO


logging.basicConfig(
    level=_log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)

server = Server(SERVER_NAME)


def build_tools() -> list[Tool]:
    return [
        Tool(name=name, description=meta["description"], inputSchema=meta["inputSchema"])
        for name, meta in TOOL_METADATA.items()
    ]


def build_resources() -> list[Resource]:
    return [
        Resource(
            uri=STATUS_URI,
            name="Server Status",
            description="Non-secret server configuration",
            mimeType="application/json",
        ),
        Resource(
            uri=CAPABILITIES_URI,
            name="Capabilities",
            description="Available tools and prompts",
            mimeType="application/json",
        ),
    ]


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    tools = build_tools()
    logger.info("Listed %s tools", len(tools))
    return tools


# Arguments are validated by the dispatch layer so that failures carry the
# field-level message and an audit event.
@server.call_tool(validate_input=False)
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Execute a tool; failures are raised so the SDK flags the result as an error."""
    logger.info("Tool called: %s", name)
    result = await dispatch_tool(name, arguments)
    if result.is_error:
        raise ToolCallError(result.text)
    return [TextContent(type="text", text=result.text)]


@server.list_prompts()
async def list_prompts() -> list[Prompt]:
    """List sprint-planning prompts."""
    return list_prompt_definitions()


@server.get_prompt()
async def get_prompt(name: str, arguments: dict[str, str] | None) -> GetPromptResult:
    """Render a prompt."""
    return render_prompt(name, arguments)


@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return build_resources()


def _server_status() -> dict[str, Any]:
    status: dict[str, Any] = {
        "server": SERVER_NAME,
        "version": __version__,
        "tools_available": len(TOOL_METADATA),
        "prompts_available": len(PROMPT_SPECS_BY_NAME),
        "configured": False,
    }
    try:
        runtime = initialize_runtime_from_env()
    except SafeError as err:
        status["config_error"] = err.message
        return status

    config = runtime.config
    status["configured"] = True
    status["auth_mode"] = config.auth_mode
    status["environment"] = config.environment
    status["default_owner_set"] = config.default_owner is not None
    status["api_url"] = config.api_url
    status["graphql_url"] = config.graphql_url
    status["timeout_s"] = config.limits.timeout_s
    status["audit"] = {"file_sink_enabled": config.audit_log_path is not None}
    return status


@server.read_resource()
async def read_resource(uri: Any) -> str:
    """Read resource content."""
    uri_s = uri if isinstance(uri, str) else str(uri)

    if uri_s == CAPABILITIES_URI:
        caps = {
            "server": SERVER_NAME,
            "version": __version__,
            "tools": sorted(TOOL_METADATA.keys()),
            "prompts": sorted(PROMPT_SPECS_BY_NAME.keys()),
            "behavior": {
                "caching": False,
                "retries": False,
                "bulk_operations_are_atomic": False,
            },
        }
        return json.dumps(caps, indent=2)

    if uri_s == STATUS_URI:
        return json.dumps(_server_status(), indent=2)

    raise ValueError(f"Unknown resource: {uri_s}")


async def run_server() -> None:
    """Run the server over stdio."""
    # Fail fast on invalid/missing host configuration.
    try:
        _ = initialize_runtime_from_env()
    except SafeError as exc:
        logger.error("Startup configuration error: %s", exc.message)
        raise

    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


async def test_server() -> None:
    """Lightweight self-test: build tool, prompt and resource objects."""
    tools = build_tools()
    prompts = list_prompt_definitions()
    resources = build_resources()
    print(
        f"{SERVER_NAME} {__version__}: {len(tools)} tools, {len(prompts)} prompts, {len(resources)} resources",
        file=sys.stderr,
    )
