"""Repository operations."""

from __future__ import annotations

from typing import Any

from . import queries
from .errors import GITHUB, NOT_FOUND, SafeError
from .github_client import GitHubClient


def _name(obj: object) -> str | None:
    if isinstance(obj, dict) and isinstance(obj.get("name"), str):
        return obj["name"]
    return None


def _count(obj: object) -> int | None:
    if isinstance(obj, dict) and isinstance(obj.get("totalCount"), int):
        return obj["totalCount"]
    return None


def _repository_from_graphql(repo: dict[str, Any]) -> dict[str, Any]:
    license_info = repo.get("licenseInfo")
    return {
        "id": repo.get("id"),
        "name": repo.get("name"),
        "full_name": repo.get("nameWithOwner"),
        "description": repo.get("description"),
        "url": repo.get("url"),
        "homepage_url": repo.get("homepageUrl") or None,
        "primary_language": _name(repo.get("primaryLanguage")),
        "private": repo.get("isPrivate"),
        "fork": repo.get("isFork"),
        "archived": repo.get("isArchived"),
        "template": repo.get("isTemplate"),
        "stars": repo.get("stargazerCount"),
        "forks": repo.get("forkCount"),
        "watchers": _count(repo.get("watchers")),
        "open_issues": _count(repo.get("openIssues")),
        "default_branch": _name(repo.get("defaultBranchRef")),
        "license": (
            {"name": license_info.get("name"), "spdx_id": license_info.get("spdxId")}
            if isinstance(license_info, dict)
            else None
        ),
        "created_at": repo.get("createdAt"),
        "updated_at": repo.get("updatedAt"),
        "pushed_at": repo.get("pushedAt"),
    }


def _repository_from_rest(repo: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": repo.get("node_id"),
        "name": repo.get("name"),
        "full_name": repo.get("full_name"),
        "description": repo.get("description"),
        "url": repo.get("html_url"),
        "primary_language": repo.get("language"),
        "private": repo.get("private"),
        "fork": repo.get("fork"),
        "archived": repo.get("archived"),
        "stars": repo.get("stargazers_count"),
        "forks": repo.get("forks_count"),
        "open_issues": repo.get("open_issues_count"),
        "default_branch": repo.get("default_branch"),
        "updated_at": repo.get("updated_at"),
        "pushed_at": repo.get("pushed_at"),
    }


class RepositoryOperations:
    """Repository reads."""

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    async def get_repository(self, args: dict[str, Any]) -> dict[str, Any]:
        owner, repo = args["owner"], args["repo"]
        data = await self._client.graphql_call(queries.GET_REPOSITORY, {"owner": owner, "name": repo})
        repository = data.get("repository")
        if not isinstance(repository, dict):
            raise SafeError(code=NOT_FOUND, message=f"Repository {owner}/{repo} not found")
        return {"repository": _repository_from_graphql(repository)}

    async def list_repositories(self, args: dict[str, Any]) -> dict[str, Any]:
        """List a user's repositories via REST (richer filtering than GraphQL)."""
        owner = args["owner"]
        data = await self._client.rest_call(
            "GET",
            f"/users/{owner}/repos",
            params={
                "type": args.get("type"),
                "sort": args.get("sort"),
                "direction": args.get("direction"),
                "per_page": args.get("per_page"),
                "page": args.get("page"),
            },
        )
        if not isinstance(data, list):
            raise SafeError(code=GITHUB, message="Unexpected repositories response")
        repositories = [_repository_from_rest(r) for r in data if isinstance(r, dict)]
        return {"owner": owner, "page": args.get("page"), "repositories": repositories}
