"""Error taxonomy and caller-visible error messages.

Every failure that reaches the dispatch layer is a SafeError whose ``code`` names
its kind. Operation modules never translate upstream errors themselves; the API
client builds them from the HTTP status (or GraphQL envelope) and the dispatch
layer renders them with ``describe_error``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

VALIDATION = "Validation"
UNKNOWN_TOOL = "UnknownTool"
AUTH = "Auth"
NOT_FOUND = "NotFound"
RATE_LIMIT = "RateLimit"
CONFLICT = "Conflict"
UPSTREAM_VALIDATION = "UpstreamValidation"
GITHUB = "GitHub"
CONFIG = "Config"
INTERNAL = "Internal"

# Codes that mean the request never reached (or was refused before) the network.
CALLER_ERROR_CODES: frozenset[str] = frozenset({VALIDATION, UNKNOWN_TOOL, CONFIG})


@dataclass(frozen=True, slots=True)
class SafeError(Exception):
    """An error safe to expose to agents.

    Must never include the configured credential.
    """

    code: str
    message: str
    hint: str | None = None
    status_code: int | None = None
    details: Any = None
    reset_at: str | None = None

    def __str__(self) -> str:
        return self.message


class ToolCallError(Exception):
    """Raised toward the MCP SDK so the tool result is flagged as an error."""


def validation_error(message: str, hint: str | None = None) -> SafeError:
    """Error for arguments that fail their tool schema."""
    return SafeError(code=VALIDATION, message=message, hint=hint)


def _upstream_message(payload: object, default: str) -> str:
    if isinstance(payload, Mapping) and isinstance(payload.get("message"), str) and payload["message"]:
        return payload["message"]
    return default


def _reset_at_from_headers(headers: Mapping[str, str] | None) -> str | None:
    if not headers:
        return None
    raw = headers.get("x-ratelimit-reset")
    if raw is None:
        return None
    try:
        epoch = int(raw)
    except ValueError:
        return None
    return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def _is_rate_limited(status_code: int, headers: Mapping[str, str] | None, message: str) -> bool:
    if status_code == 429:
        return True
    if status_code != 403:
        return False
    if headers and headers.get("x-ratelimit-remaining") == "0":
        return True
    return "rate limit" in message.lower()


def upstream_error(
    status_code: int,
    payload: object = None,
    headers: Mapping[str, str] | None = None,
) -> SafeError:
    """Map a non-2xx GitHub response to its error kind."""
    message = _upstream_message(payload, f"GitHub request failed with status {status_code}")

    if _is_rate_limited(status_code, headers, message):
        return SafeError(
            code=RATE_LIMIT,
            message=message,
            status_code=status_code,
            reset_at=_reset_at_from_headers(headers),
        )
    if status_code in (401, 403):
        return SafeError(code=AUTH, message=message, status_code=status_code)
    if status_code == 404:
        return SafeError(code=NOT_FOUND, message=message, status_code=status_code)
    if status_code == 409:
        return SafeError(code=CONFLICT, message=message, status_code=status_code)
    if status_code == 422:
        details = payload.get("errors") if isinstance(payload, Mapping) else None
        return SafeError(
            code=UPSTREAM_VALIDATION,
            message=message,
            status_code=status_code,
            details=details if details is not None else payload,
        )
    return SafeError(code=GITHUB, message=message, status_code=status_code)


def graphql_errors_error(errors: list[Any], headers: Mapping[str, str] | None = None) -> SafeError:
    """Map a non-empty GraphQL ``errors`` array to a single error."""
    messages: list[str] = []
    rate_limited = False
    for e in errors:
        if not isinstance(e, Mapping):
            continue
        if isinstance(e.get("message"), str):
            messages.append(e["message"])
        if e.get("type") == "RATE_LIMITED":
            rate_limited = True

    message = ", ".join(messages) if messages else "GitHub GraphQL request failed"
    if rate_limited:
        return SafeError(code=RATE_LIMIT, message=message, reset_at=_reset_at_from_headers(headers))
    return SafeError(code=GITHUB, message=message, details=errors)


def describe_error(err: SafeError) -> str:
    """Render the single descriptive string returned to the agent host."""
    if err.code == VALIDATION:
        text = f"Invalid arguments: {err.message}"
    elif err.code == UNKNOWN_TOOL:
        text = err.message
    elif err.code == AUTH:
        prefix = "Permission Denied" if err.status_code == 403 else "Authentication Failed"
        text = f"{prefix}: {err.message}"
    elif err.code == NOT_FOUND:
        text = f"Not Found: {err.message}"
    elif err.code == RATE_LIMIT:
        text = f"Rate Limit Exceeded: {err.message}"
        if err.reset_at:
            text += f"\nResets at: {err.reset_at}"
    elif err.code == CONFLICT:
        text = f"Conflict: {err.message}"
    elif err.code == UPSTREAM_VALIDATION:
        text = f"Validation Error: {err.message}"
        if err.details is not None:
            text += f"\nDetails: {json.dumps(err.details, default=str)}"
    elif err.code == CONFIG:
        text = f"Configuration Error: {err.message}"
    elif err.code == INTERNAL:
        text = err.message
    else:
        text = f"GitHub API Error: {err.message}"

    if err.hint:
        text += f"\n{err.hint}"
    return text
