"""Tool registry and dispatch layer.

This module:
- builds the process-wide runtime (config, client, operation modules) once
- resolves a tool name to its declaration and bound operation method
- validates arguments before any upstream request is built
- serializes results or renders a single caller-visible error message
- writes exactly one audit event per call, with its own correlation_id
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from .audit import FAILED, SUCCEEDED, AuditLogger, build_event, new_correlation_id, outcome_for_error
from .auth import token_provider_from_config
from .config import AppConfig, load_config_from_env
from .errors import UNKNOWN_TOOL, SafeError, describe_error
from .github_client import GitHubClient
from .issues import IssueOperations
from .projects import ProjectOperations
from .repositories import RepositoryOperations
from .schemas import TOOL_METADATA, TOOL_SPECS_BY_NAME, validate_arguments

logger = logging.getLogger(__name__)

__all__ = [
    "TOOL_METADATA",
    "Runtime",
    "ToolResult",
    "build_runtime",
    "dispatch_tool",
    "initialize_runtime_from_env",
]


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Text returned to the agent host, and whether it reports a failure."""

    text: str
    is_error: bool = False


@dataclass(frozen=True, slots=True)
class Runtime:
    """Process-wide dependencies shared (read-only) across tool calls."""

    config: AppConfig
    audit: AuditLogger
    github: GitHubClient
    repositories: RepositoryOperations
    issues: IssueOperations
    projects: ProjectOperations

    @property
    def fallbacks(self) -> dict[str, Any]:
        """Configuration defaults available to omitted arguments."""
        return {"default_owner": self.config.default_owner}


_RUNTIME: Runtime | None = None


def build_runtime(config: AppConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> Runtime:
    """Wire a runtime from configuration. ``transport`` is for tests."""
    github = GitHubClient(
        token_provider=token_provider_from_config(config, transport=transport),
        limits=config.limits,
        api_base_url=config.api_url,
        graphql_url=config.graphql_url,
        transport=transport,
    )
    return Runtime(
        config=config,
        audit=AuditLogger(sink_path=config.audit_log_path),
        github=github,
        repositories=RepositoryOperations(github),
        issues=IssueOperations(github),
        projects=ProjectOperations(github),
    )


def initialize_runtime_from_env() -> Runtime:
    """Initialize and cache runtime from environment.

    Called at server startup (fail-fast), and can also be used lazily.
    """
    global _RUNTIME  # pylint: disable=global-statement
    if _RUNTIME is not None:
        return _RUNTIME

    _RUNTIME = build_runtime(load_config_from_env())
    logger.info(
        "Runtime initialized (auth=%s, environment=%s, default_owner=%s)",
        _RUNTIME.config.auth_mode,
        _RUNTIME.config.environment,
        "set" if _RUNTIME.config.default_owner else "unset",
    )
    return _RUNTIME


def _target_from_args(arguments: object) -> str:
    if not isinstance(arguments, Mapping):
        return "<unknown>"
    owner = arguments.get("owner")
    repo = arguments.get("repo")
    if isinstance(repo, str) and repo:
        return f"{owner}/{repo}" if isinstance(owner, str) and owner else repo
    for key, label in (
        ("projectId", "project"),
        ("login", "owner"),
        ("ownerId", "owner"),
        ("fieldId", "field"),
        ("itemId", "item"),
        ("statusUpdateId", "status_update"),
    ):
        value = arguments.get(key)
        if isinstance(value, str) and value:
            return f"{label}:{value}"
    return "<unknown>"


def _write_audit(
    runtime: Runtime | None,
    start: float | None,
    *,
    correlation_id: str,
    tool: str,
    target: str,
    outcome: str,
    reason: str | None,
) -> None:
    if runtime is not None and start is not None:
        runtime.audit.write_event(
            build_event(
                correlation_id=correlation_id,
                tool=tool,
                target=target,
                outcome=outcome,
                reason=reason,
                duration_ms=runtime.audit.measure_duration_ms(start),
            )
        )
        return
    # No runtime (unknown tool or config failure): still emit the event to stderr.
    AuditLogger(sink_path=None).write_event(
        build_event(
            correlation_id=correlation_id,
            tool=tool,
            target=target,
            outcome=outcome,
            reason=reason,
        )
    )


async def dispatch_tool(name: str, arguments: Mapping[str, Any] | None) -> ToolResult:
    """Dispatch a tool call: lookup, validate, invoke, serialize.

    Every branch terminates the call. Failures come back as a ToolResult with
    ``is_error`` set; nothing is retried.
    """
    correlation_id = new_correlation_id()
    target = _target_from_args(arguments)

    runtime: Runtime | None = None
    start: float | None = None

    try:
        spec = TOOL_SPECS_BY_NAME.get(name)
        if spec is None:
            raise SafeError(
                code=UNKNOWN_TOOL,
                message=f"Unknown tool: {name}",
                hint=f"Available tools: {', '.join(sorted(TOOL_SPECS_BY_NAME))}",
            )

        runtime = initialize_runtime_from_env()
        start = runtime.audit.measure_start()

        validated = validate_arguments(spec, arguments, runtime.fallbacks)
        operation = getattr(getattr(runtime, spec.family), spec.method)
        result = await operation(validated)

        _write_audit(
            runtime,
            start,
            correlation_id=correlation_id,
            tool=name,
            target=target,
            outcome=SUCCEEDED,
            reason=None,
        )
        return ToolResult(text=json.dumps(result, indent=2, default=str))

    except SafeError as err:
        outcome = outcome_for_error(err)
        logger.info("Tool %s %s: %s (%s)", name, outcome, err.code, correlation_id)
        _write_audit(
            runtime,
            start,
            correlation_id=correlation_id,
            tool=name,
            target=target,
            outcome=outcome,
            reason=err.message,
        )
        return ToolResult(text=describe_error(err), is_error=True)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Tool %s raised an unexpected error (%s)", name, correlation_id)
        _write_audit(
            runtime,
            start,
            correlation_id=correlation_id,
            tool=name,
            target=target,
            outcome=FAILED,
            reason="Internal error",
        )
        return ToolResult(text="Internal error", is_error=True)
