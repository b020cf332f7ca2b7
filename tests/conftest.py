"""Shared test fixtures."""

from __future__ import annotations

import github_projects_mcp.tools as tools
import pytest

_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_APP_ID",
    "GITHUB_APP_INSTALLATION_ID",
    "GITHUB_APP_PRIVATE_KEY_PATH",
    "GITHUB_OWNER",
    "GITHUB_API_URL",
    "GITHUB_GRAPHQL_URL",
    "GITHUB_MCP_ENV",
    "PORT",
    "GITHUB_MCP_TIMEOUT_S",
    "GITHUB_MCP_AUDIT_LOG_PATH",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(tools, "_RUNTIME", None)
