"""GitHub REST + GraphQL client.

Provides the two primitives every operation module builds on:
- ``rest_call``: one HTTP request against the REST base URL
- ``graphql_call``: one POST of ``{query, variables}`` to the GraphQL endpoint

Single attempt per call, no redirects, finite transport timeout. Failures are
translated to SafeError kinds and propagate immediately.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from .config import LimitsConfig
from .errors import AUTH, CONFIG, GITHUB, INTERNAL, SafeError, graphql_errors_error, upstream_error

logger = logging.getLogger(__name__)


def _stringify_params(params: Mapping[str, Any] | None) -> dict[str, str] | None:
    if params is None:
        return None
    out: dict[str, str] = {}
    for k, v in params.items():
        if v is None:
            continue
        if isinstance(v, bool):
            out[k] = "true" if v else "false"
        else:
            out[k] = str(v)
    return out


class GitHubClient:
    """Minimal authenticated GitHub client shared by all operation modules."""

    def __init__(
        self,
        *,
        token_provider,
        limits: LimitsConfig,
        api_base_url: str = "https://api.github.com",
        graphql_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create a GitHub client.

        Args:
            token_provider: Async callable that returns the bearer token.
            limits: Transport timeouts.
            api_base_url: REST base URL (https only).
            graphql_url: GraphQL endpoint; defaults to ``<api_base_url>/graphql``.
            transport: Optional httpx transport for tests.
        """
        self._token_provider = token_provider
        self._limits = limits
        self._api_base_url = api_base_url.rstrip("/")
        self._graphql_url = (graphql_url or f"{self._api_base_url}/graphql").rstrip("/")
        self._transport = transport

        for url in (self._api_base_url, self._graphql_url):
            if not url.startswith("https://"):
                raise SafeError(code=CONFIG, message="GitHub API URLs must use https://")

    @property
    def api_base_url(self) -> str:
        return self._api_base_url

    @property
    def graphql_url(self) -> str:
        return self._graphql_url

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(timeout=self._limits.timeout_s, connect=self._limits.connect_timeout_s)

    async def _token(self) -> str:
        try:
            return await self._token_provider()
        except SafeError:
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # Only the exception type is logged; its message may name the key path.
            logger.warning("Credential provider failed: %s", type(exc).__name__)
            raise SafeError(code=AUTH, message="Failed to obtain GitHub credential") from exc

    async def _send(
        self,
        method: str,
        url: str,
        *,
        json_body: object | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        token = await self._token()
        try:
            async with httpx.AsyncClient(
                follow_redirects=False,
                timeout=self._timeout(),
                transport=self._transport,
            ) as client:
                resp = await client.request(
                    method,
                    url,
                    headers=self._headers(token),
                    json=json_body,
                    params=params,
                )
        except httpx.TimeoutException as exc:
            raise SafeError(code=GITHUB, message="GitHub request timed out") from exc
        except httpx.HTTPError as exc:
            raise SafeError(code=GITHUB, message="Network request failed") from exc

        logger.debug("GitHub %s %s -> %s", method, resp.request.url.path, resp.status_code)
        return resp

    @staticmethod
    def _decode_error_payload(resp: httpx.Response) -> object:
        try:
            return resp.json()
        except ValueError:
            return None

    async def rest_call(
        self,
        method: str,
        path: str,
        body: object | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Make a REST request and return decoded JSON.

        GitHub APIs may return either an object (dict) or an array (list). A 204
        response yields an empty dict.
        """
        url = f"{self._api_base_url}{path}"
        resp = await self._send(method.upper(), url, json_body=body, params=_stringify_params(params))

        if resp.status_code >= 300:
            raise upstream_error(resp.status_code, self._decode_error_payload(resp), resp.headers)
        if resp.status_code == 204 or not resp.content:
            return {}

        try:
            return resp.json()
        # Also covers bodies that are not valid UTF-8 (UnicodeDecodeError).
        except ValueError as exc:
            raise SafeError(code=GITHUB, message="GitHub returned invalid JSON") from exc

    async def graphql_call(self, query: str, variables: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Execute a fixed GraphQL document and return its ``data`` object.

        A response carrying a non-empty ``errors`` array is a failure even when the
        HTTP status is 200; partial data is never returned.
        """
        if not isinstance(query, str) or not query.strip():
            raise SafeError(code=INTERNAL, message="GraphQL query is missing")

        resp = await self._send(
            "POST",
            self._graphql_url,
            json_body={"query": query, "variables": dict(variables or {})},
        )

        if resp.status_code >= 300:
            raise upstream_error(resp.status_code, self._decode_error_payload(resp), resp.headers)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise SafeError(code=GITHUB, message="GitHub returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise SafeError(code=GITHUB, message="GitHub returned invalid JSON")

        errors = payload.get("errors")
        if isinstance(errors, list) and errors:
            raise graphql_errors_error(errors, resp.headers)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise SafeError(code=GITHUB, message="GitHub GraphQL returned no data")
        return data
