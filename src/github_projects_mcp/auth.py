"""Bearer credential providers.

The credential is configured once at process start. Every upstream call asks the
provider for the current bearer token; there is no per-call override.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import httpx
import jwt

from .config import AppConfig, GitHubAppCredentials
from .errors import AUTH, CONFIG, GITHUB, SafeError


class StaticTokenProvider:
    """Returns a fixed personal access token."""

    def __init__(self, token: str) -> None:
        if not token:
            raise SafeError(code=CONFIG, message="GitHub token is empty")
        self._token = token

    async def __call__(self) -> str:
        return self._token


@dataclass(frozen=True, slots=True)
class InstallationToken:
    """Cached installation access token + expiry."""

    token: str
    expires_at: datetime


class GitHubAppAuth:
    """Manages GitHub App JWT creation and installation token caching."""

    def __init__(
        self,
        *,
        credentials: GitHubAppCredentials,
        api_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create an auth helper for a single app installation."""
        self._credentials = credentials
        self._api_url = api_url.rstrip("/")
        self._transport = transport
        self._lock = asyncio.Lock()
        self._cached: InstallationToken | None = None

    def _build_app_jwt(self) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            # Backdated to tolerate clock drift.
            "iat": int((now - timedelta(seconds=60)).timestamp()),
            "exp": int((now + timedelta(minutes=9)).timestamp()),
            "iss": str(self._credentials.app_id),
        }
        private_key_pem = self._credentials.private_key_path.read_text(encoding="utf-8")
        return jwt.encode(payload, private_key_pem, algorithm="RS256")

    async def __call__(self) -> str:
        return await self.get_installation_token()

    async def get_installation_token(self) -> str:
        """Get a valid installation access token (refreshing if needed)."""
        async with self._lock:
            if self._cached is not None:
                remaining = (self._cached.expires_at - datetime.now(timezone.utc)).total_seconds()
                if remaining > 30:
                    return self._cached.token

            headers = {
                "Authorization": f"Bearer {self._build_app_jwt()}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
            url = f"{self._api_url}/app/installations/{self._credentials.installation_id}/access_tokens"
            try:
                async with httpx.AsyncClient(
                    follow_redirects=False,
                    timeout=30.0,
                    transport=self._transport,
                ) as client:
                    resp = await client.post(url, headers=headers, json={})
            except httpx.HTTPError as exc:
                raise SafeError(code=GITHUB, message="Failed to obtain installation token") from exc

            if resp.status_code in (401, 403):
                raise SafeError(code=AUTH, message="GitHub App authentication failed", status_code=resp.status_code)
            if resp.status_code >= 300:
                raise SafeError(code=GITHUB, message="Failed to obtain installation token", status_code=resp.status_code)

            try:
                data = resp.json()
            except ValueError as exc:
                raise SafeError(code=GITHUB, message="GitHub returned invalid JSON") from exc
            token = data.get("token") if isinstance(data, dict) else None
            expires_at_raw = data.get("expires_at") if isinstance(data, dict) else None
            if not token or not expires_at_raw:
                raise SafeError(code=AUTH, message="GitHub token response missing required fields")

            # RFC3339 timestamp like 2025-01-01T00:00:00Z
            expires_at = datetime.fromisoformat(expires_at_raw.replace("Z", "+00:00")).astimezone(timezone.utc)
            self._cached = InstallationToken(token=token, expires_at=expires_at)
            return token


def token_provider_from_config(config: AppConfig, *, transport: httpx.AsyncBaseTransport | None = None):
    """Build the process-wide token provider for the configured credential."""
    if config.token:
        return StaticTokenProvider(config.token)
    if config.github_app is None:
        raise SafeError(code=CONFIG, message="No GitHub credential configured")
    return GitHubAppAuth(credentials=config.github_app, api_url=config.api_url, transport=transport)
