"""Configuration loading for github-projects-mcp.

Configuration is supplied by the host environment (e.g., MCP client config), not by the agent.
The credential (token or GitHub App private key path) is a secret and must never be emitted
to agents, logs, or audit reasons.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import CONFIG, SafeError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT_S = 30.0
ENVIRONMENTS: frozenset[str] = frozenset({"development", "production", "test"})


@dataclass(frozen=True, slots=True)
class LimitsConfig:
    """Transport limits."""

    # Network
    timeout_s: float = DEFAULT_TIMEOUT_S
    connect_timeout_s: float = 5.0


@dataclass(frozen=True, slots=True)
class GitHubAppCredentials:
    """GitHub App installation binding."""

    app_id: int
    installation_id: int
    private_key_path: Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Process-wide configuration, read once at startup."""

    token: str | None
    github_app: GitHubAppCredentials | None

    default_owner: str | None
    api_url: str
    graphql_url: str

    environment: str
    port: int

    audit_log_path: Path | None
    limits: LimitsConfig

    @property
    def auth_mode(self) -> str:
        """Return which credential kind is configured ("token" or "github_app")."""
        return "token" if self.token else "github_app"


def _strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _load_github_app() -> GitHubAppCredentials | None:
    app_id_raw = _strip_or_none(os.getenv("GITHUB_APP_ID"))
    installation_id_raw = _strip_or_none(os.getenv("GITHUB_APP_INSTALLATION_ID"))
    private_key_path_raw = _strip_or_none(os.getenv("GITHUB_APP_PRIVATE_KEY_PATH"))

    if not (app_id_raw or installation_id_raw or private_key_path_raw):
        return None
    if not app_id_raw or not installation_id_raw or not private_key_path_raw:
        raise SafeError(
            code=CONFIG,
            message="GitHub App configuration requires GITHUB_APP_ID, GITHUB_APP_INSTALLATION_ID and GITHUB_APP_PRIVATE_KEY_PATH",
        )

    try:
        app_id = int(app_id_raw)
        installation_id = int(installation_id_raw)
    except ValueError as exc:
        raise SafeError(code=CONFIG, message="GITHUB_APP_ID and GITHUB_APP_INSTALLATION_ID must be integers") from exc

    key_path = Path(private_key_path_raw)
    if not key_path.is_absolute():
        raise SafeError(code=CONFIG, message="GITHUB_APP_PRIVATE_KEY_PATH must be an absolute path")

    # Fail fast if unreadable; never echo the path.
    try:
        if not key_path.is_file():
            raise SafeError(code=CONFIG, message="GitHub App private key file is missing or not a file")
        _ = key_path.read_bytes()
    except SafeError:
        raise
    except OSError as exc:
        raise SafeError(code=CONFIG, message="GitHub App private key file is unreadable") from exc

    return GitHubAppCredentials(app_id=app_id, installation_id=installation_id, private_key_path=key_path)


def _parse_https_url(name: str, value: str) -> str:
    url = value.rstrip("/")
    if not url.startswith("https://"):
        raise SafeError(code=CONFIG, message=f"{name} must be an https:// URL")
    return url


def _parse_positive_float(name: str, value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError as exc:
        raise SafeError(code=CONFIG, message=f"{name} must be a number") from exc
    if parsed <= 0:
        raise SafeError(code=CONFIG, message=f"{name} must be > 0")
    return parsed


def load_config_from_env() -> AppConfig:
    """Load and validate configuration from environment variables.

    Raises:
        SafeError: If configuration is missing/invalid.
    """
    token = _strip_or_none(os.getenv("GITHUB_TOKEN"))
    github_app = None if token else _load_github_app()
    if token is None and github_app is None:
        raise SafeError(
            code=CONFIG,
            message="Missing required configuration (GITHUB_TOKEN, or GITHUB_APP_ID/GITHUB_APP_INSTALLATION_ID/GITHUB_APP_PRIVATE_KEY_PATH)",
        )

    api_url = _parse_https_url("GITHUB_API_URL", os.getenv("GITHUB_API_URL") or DEFAULT_API_URL)
    graphql_raw = _strip_or_none(os.getenv("GITHUB_GRAPHQL_URL"))
    graphql_url = _parse_https_url("GITHUB_GRAPHQL_URL", graphql_raw) if graphql_raw else f"{api_url}/graphql"

    environment = (_strip_or_none(os.getenv("GITHUB_MCP_ENV")) or "development").lower()
    if environment not in ENVIRONMENTS:
        raise SafeError(code=CONFIG, message="GITHUB_MCP_ENV must be one of: development, production, test")

    port_raw = _strip_or_none(os.getenv("PORT")) or "3000"
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise SafeError(code=CONFIG, message="PORT must be an integer") from exc

    timeout_s = _parse_positive_float("GITHUB_MCP_TIMEOUT_S", os.getenv("GITHUB_MCP_TIMEOUT_S"), DEFAULT_TIMEOUT_S)

    audit_path_raw = _strip_or_none(os.getenv("GITHUB_MCP_AUDIT_LOG_PATH"))
    audit_path: Path | None = None
    if audit_path_raw:
        p = Path(audit_path_raw)
        if not p.is_absolute():
            raise SafeError(code=CONFIG, message="GITHUB_MCP_AUDIT_LOG_PATH must be an absolute path when set")
        audit_path = p

    return AppConfig(
        token=token,
        github_app=github_app,
        default_owner=_strip_or_none(os.getenv("GITHUB_OWNER")),
        api_url=api_url,
        graphql_url=graphql_url,
        environment=environment,
        port=port,
        audit_log_path=audit_path,
        limits=LimitsConfig(timeout_s=timeout_s),
    )
