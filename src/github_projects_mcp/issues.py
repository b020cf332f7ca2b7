"""Issue operations.

Reads of a single issue go through GraphQL; list/create/update use REST, which
has the richer filtering options. Both paths return the same issue shape.
"""

from __future__ import annotations

from typing import Any

from . import queries
from .errors import GITHUB, NOT_FOUND, SafeError, validation_error
from .github_client import GitHubClient


def _nodes(connection: object) -> list[dict[str, Any]]:
    if not isinstance(connection, dict):
        return []
    nodes = connection.get("nodes")
    if not isinstance(nodes, list):
        return []
    return [n for n in nodes if isinstance(n, dict)]


def _lower(value: object) -> str | None:
    return value.lower() if isinstance(value, str) else None


def issue_from_graphql(issue: dict[str, Any]) -> dict[str, Any]:
    """Reshape a GraphQL ``Issue`` node."""
    author = issue.get("author")
    milestone = issue.get("milestone")
    comments = issue.get("comments")
    return {
        "id": issue.get("id"),
        "number": issue.get("number"),
        "title": issue.get("title"),
        "body": issue.get("body"),
        "state": _lower(issue.get("state")),
        "url": issue.get("url"),
        "created_at": issue.get("createdAt"),
        "updated_at": issue.get("updatedAt"),
        "closed_at": issue.get("closedAt"),
        "author": {"login": author.get("login"), "url": author.get("url")} if isinstance(author, dict) else None,
        "assignees": [{"login": a.get("login"), "url": a.get("url")} for a in _nodes(issue.get("assignees"))],
        "labels": [{"name": lbl.get("name"), "color": lbl.get("color")} for lbl in _nodes(issue.get("labels"))],
        "milestone": (
            {
                "number": milestone.get("number"),
                "title": milestone.get("title"),
                "due_on": milestone.get("dueOn"),
                "state": _lower(milestone.get("state")),
            }
            if isinstance(milestone, dict)
            else None
        ),
        "comments": comments.get("totalCount") if isinstance(comments, dict) else None,
    }


def issue_from_rest(issue: dict[str, Any]) -> dict[str, Any]:
    """Reshape a REST issue object."""
    user = issue.get("user")
    milestone = issue.get("milestone")
    assignees = issue.get("assignees") if isinstance(issue.get("assignees"), list) else []
    labels = issue.get("labels") if isinstance(issue.get("labels"), list) else []
    return {
        "id": issue.get("node_id"),
        "number": issue.get("number"),
        "title": issue.get("title"),
        "body": issue.get("body"),
        "state": _lower(issue.get("state")),
        "url": issue.get("html_url"),
        "created_at": issue.get("created_at"),
        "updated_at": issue.get("updated_at"),
        "closed_at": issue.get("closed_at"),
        "author": {"login": user.get("login"), "url": user.get("html_url")} if isinstance(user, dict) else None,
        "assignees": [{"login": a.get("login"), "url": a.get("html_url")} for a in assignees if isinstance(a, dict)],
        "labels": [
            {"name": lbl.get("name"), "color": lbl.get("color")}
            for lbl in labels
            if isinstance(lbl, dict)
        ],
        "milestone": (
            {
                "number": milestone.get("number"),
                "title": milestone.get("title"),
                "due_on": milestone.get("due_on"),
                "state": _lower(milestone.get("state")),
            }
            if isinstance(milestone, dict)
            else None
        ),
        "comments": issue.get("comments"),
    }


def _optional_payload(args: dict[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    return {k: args[k] for k in keys if k in args}


class IssueOperations:
    """Issue reads and writes."""

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    async def get_issue(self, args: dict[str, Any]) -> dict[str, Any]:
        owner, repo, number = args["owner"], args["repo"], args["issueNumber"]
        data = await self._client.graphql_call(
            queries.GET_ISSUE,
            {"owner": owner, "name": repo, "number": number},
        )
        repository = data.get("repository")
        issue = repository.get("issue") if isinstance(repository, dict) else None
        if not isinstance(issue, dict):
            raise SafeError(code=NOT_FOUND, message=f"Issue #{number} not found in {owner}/{repo}")
        return {"issue": issue_from_graphql(issue)}

    async def list_issues(self, args: dict[str, Any]) -> dict[str, Any]:
        owner, repo = args["owner"], args["repo"]
        params: dict[str, Any] = {
            "state": args.get("state"),
            "sort": args.get("sort"),
            "direction": args.get("direction"),
            "per_page": args.get("per_page"),
            "page": args.get("page"),
        }
        labels = args.get("labels")
        if labels:
            params["labels"] = ",".join(labels)
        if args.get("assignee"):
            params["assignee"] = args["assignee"]
        if args.get("milestone"):
            params["milestone"] = args["milestone"]

        data = await self._client.rest_call("GET", f"/repos/{owner}/{repo}/issues", params=params)
        if not isinstance(data, list):
            raise SafeError(code=GITHUB, message="Unexpected issues response")

        # The issues endpoint also returns pull requests.
        issues = [issue_from_rest(i) for i in data if isinstance(i, dict) and "pull_request" not in i]
        return {"owner": owner, "repo": repo, "page": args.get("page"), "issues": issues}

    async def create_issue(self, args: dict[str, Any]) -> dict[str, Any]:
        owner, repo = args["owner"], args["repo"]
        payload: dict[str, Any] = {"title": args["title"]}
        payload.update(_optional_payload(args, ("body", "milestone")))
        if args.get("assignees"):
            payload["assignees"] = args["assignees"]
        if args.get("labels"):
            payload["labels"] = args["labels"]

        data = await self._client.rest_call("POST", f"/repos/{owner}/{repo}/issues", body=payload)
        if not isinstance(data, dict):
            raise SafeError(code=GITHUB, message="Unexpected issue response")
        return {"issue": issue_from_rest(data)}

    async def update_issue(self, args: dict[str, Any]) -> dict[str, Any]:
        """Patch only the supplied fields; an explicit null milestone clears it."""
        owner, repo, number = args["owner"], args["repo"], args["issueNumber"]
        payload = _optional_payload(args, ("title", "body", "state", "assignees", "labels", "milestone"))
        if not payload:
            raise validation_error(
                "No fields to update",
                hint="Provide at least one of: title, body, state, assignees, labels, milestone",
            )

        data = await self._client.rest_call("PATCH", f"/repos/{owner}/{repo}/issues/{number}", body=payload)
        if not isinstance(data, dict):
            raise SafeError(code=GITHUB, message="Unexpected issue response")
        return {"issue": issue_from_rest(data)}
