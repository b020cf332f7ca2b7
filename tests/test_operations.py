"""Operation module tests against a recording client stub."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from github_projects_mcp import queries
from github_projects_mcp.config import LimitsConfig
from github_projects_mcp.errors import GITHUB, NOT_FOUND, VALIDATION, SafeError
from github_projects_mcp.github_client import GitHubClient
from github_projects_mcp.issues import IssueOperations
from github_projects_mcp.projects import ProjectOperations
from github_projects_mcp.repositories import RepositoryOperations
from github_projects_mcp.schemas import FieldValue


@dataclass
class DummyClient:
    """Returns queued responses and records every call."""

    responses: list[Any] = field(default_factory=list)
    rest_calls: list[tuple[str, str, Any, Any]] = field(default_factory=list)
    graphql_calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def _next(self) -> Any:
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def rest_call(self, method: str, path: str, body: Any = None, params: Any = None) -> Any:
        self.rest_calls.append((method, path, body, params))
        return self._next()

    async def graphql_call(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        self.graphql_calls.append((query, dict(variables or {})))
        return self._next()


def _rest_issue(number: int, **extra: Any) -> dict[str, Any]:
    issue = {
        "node_id": f"I_{number}",
        "number": number,
        "title": f"Issue {number}",
        "body": None,
        "state": "open",
        "html_url": f"https://github.com/octo/hello/issues/{number}",
        "user": {"login": "mona", "html_url": "https://github.com/mona"},
        "assignees": [],
        "labels": [{"name": "bug", "color": "d73a4a"}],
        "milestone": None,
        "comments": 2,
    }
    issue.update(extra)
    return issue


# Repositories


@pytest.mark.asyncio
async def test_get_repository_reshapes_graphql() -> None:
    client = DummyClient(
        responses=[
            {
                "repository": {
                    "id": "R_1",
                    "name": "hello",
                    "nameWithOwner": "octo/hello",
                    "isPrivate": False,
                    "stargazerCount": 7,
                    "primaryLanguage": {"name": "Python"},
                    "defaultBranchRef": {"name": "main"},
                    "watchers": {"totalCount": 3},
                    "openIssues": {"totalCount": 4},
                    "licenseInfo": {"name": "MIT License", "spdxId": "MIT"},
                }
            }
        ]
    )

    out = await RepositoryOperations(client).get_repository({"owner": "octo", "repo": "hello"})

    assert client.graphql_calls == [(queries.GET_REPOSITORY, {"owner": "octo", "name": "hello"})]
    repo = out["repository"]
    assert repo["full_name"] == "octo/hello"
    assert repo["primary_language"] == "Python"
    assert repo["default_branch"] == "main"
    assert repo["stars"] == 7
    assert repo["watchers"] == 3
    assert repo["open_issues"] == 4
    assert repo["license"] == {"name": "MIT License", "spdx_id": "MIT"}


@pytest.mark.asyncio
async def test_get_repository_missing_is_not_found() -> None:
    client = DummyClient(responses=[{"repository": None}])

    with pytest.raises(SafeError) as exc:
        await RepositoryOperations(client).get_repository({"owner": "octo", "repo": "nope"})

    assert exc.value.code == NOT_FOUND
    assert exc.value.message == "Repository octo/nope not found"


@pytest.mark.asyncio
async def test_list_repositories_uses_rest_params() -> None:
    client = DummyClient(responses=[[{"name": "hello", "full_name": "octo/hello", "stargazers_count": 1}]])

    out = await RepositoryOperations(client).list_repositories(
        {"owner": "octo", "type": "owner", "sort": "updated", "direction": "desc", "per_page": 10, "page": 2}
    )

    method, path, body, params = client.rest_calls[0]
    assert (method, path, body) == ("GET", "/users/octo/repos", None)
    assert params == {"type": "owner", "sort": "updated", "direction": "desc", "per_page": 10, "page": 2}
    assert out["owner"] == "octo"
    assert out["page"] == 2
    assert out["repositories"][0]["full_name"] == "octo/hello"


@pytest.mark.asyncio
async def test_list_repositories_rejects_non_list() -> None:
    client = DummyClient(responses=[{"message": "weird"}])

    with pytest.raises(SafeError) as exc:
        await RepositoryOperations(client).list_repositories({"owner": "octo"})

    assert exc.value.code == GITHUB


# Issues


@pytest.mark.asyncio
async def test_get_issue_reshapes_graphql() -> None:
    client = DummyClient(
        responses=[
            {
                "repository": {
                    "issue": {
                        "id": "I_1",
                        "number": 1,
                        "title": "Bug",
                        "state": "OPEN",
                        "author": {"login": "mona", "url": "https://github.com/mona"},
                        "assignees": {"nodes": [{"login": "hubot", "url": "https://github.com/hubot"}]},
                        "labels": {"nodes": [{"name": "bug", "color": "d73a4a"}]},
                        "milestone": {"number": 2, "title": "v1", "state": "OPEN", "dueOn": None},
                        "comments": {"totalCount": 5},
                    }
                }
            }
        ]
    )

    out = await IssueOperations(client).get_issue({"owner": "octo", "repo": "hello", "issueNumber": 1})

    assert client.graphql_calls[0][1] == {"owner": "octo", "name": "hello", "number": 1}
    issue = out["issue"]
    assert issue["state"] == "open"
    assert issue["author"]["login"] == "mona"
    assert issue["assignees"] == [{"login": "hubot", "url": "https://github.com/hubot"}]
    assert issue["labels"] == [{"name": "bug", "color": "d73a4a"}]
    assert issue["milestone"]["state"] == "open"
    assert issue["comments"] == 5


@pytest.mark.asyncio
async def test_get_issue_missing_is_not_found() -> None:
    client = DummyClient(responses=[{"repository": {"issue": None}}])

    with pytest.raises(SafeError) as exc:
        await IssueOperations(client).get_issue({"owner": "octo", "repo": "hello", "issueNumber": 99})

    assert exc.value.code == NOT_FOUND
    assert exc.value.message == "Issue #99 not found in octo/hello"


@pytest.mark.asyncio
async def test_list_issues_builds_query_and_drops_pull_requests() -> None:
    client = DummyClient(responses=[[_rest_issue(1), _rest_issue(2, pull_request={"url": "x"}), _rest_issue(3)]])

    out = await IssueOperations(client).list_issues(
        {
            "owner": "octo",
            "repo": "hello",
            "state": "all",
            "labels": ["bug", "ui"],
            "assignee": "mona",
            "sort": "updated",
            "direction": "asc",
            "per_page": 50,
            "page": 2,
        }
    )

    method, path, _body, params = client.rest_calls[0]
    assert (method, path) == ("GET", "/repos/octo/hello/issues")
    assert params == {
        "state": "all",
        "labels": "bug,ui",
        "assignee": "mona",
        "sort": "updated",
        "direction": "asc",
        "per_page": 50,
        "page": 2,
    }
    assert [i["number"] for i in out["issues"]] == [1, 3]
    assert out["issues"][0]["labels"] == [{"name": "bug", "color": "d73a4a"}]


@pytest.mark.asyncio
async def test_create_issue_sends_only_supplied_fields() -> None:
    client = DummyClient(responses=[_rest_issue(7)])

    out = await IssueOperations(client).create_issue(
        {"owner": "octo", "repo": "hello", "title": "New", "labels": ["bug"], "assignees": []}
    )

    assert client.rest_calls[0][:3] == ("POST", "/repos/octo/hello/issues", {"title": "New", "labels": ["bug"]})
    assert out["issue"]["number"] == 7


@pytest.mark.asyncio
async def test_update_issue_patches_supplied_fields_and_null_milestone() -> None:
    client = DummyClient(responses=[_rest_issue(3, state="closed")])

    out = await IssueOperations(client).update_issue(
        {"owner": "octo", "repo": "hello", "issueNumber": 3, "state": "closed", "milestone": None}
    )

    assert client.rest_calls[0][:3] == (
        "PATCH",
        "/repos/octo/hello/issues/3",
        {"state": "closed", "milestone": None},
    )
    assert out["issue"]["state"] == "closed"


@pytest.mark.asyncio
async def test_update_issue_without_changes_is_rejected_before_network() -> None:
    client = DummyClient()

    with pytest.raises(SafeError) as exc:
        await IssueOperations(client).update_issue({"owner": "octo", "repo": "hello", "issueNumber": 3})

    assert exc.value.code == VALIDATION
    assert client.rest_calls == []


# Projects: reads


@pytest.mark.asyncio
async def test_get_project_missing_node_is_not_found() -> None:
    client = DummyClient(responses=[{"node": None}])

    with pytest.raises(SafeError) as exc:
        await ProjectOperations(client).get_project({"projectId": "PVT_x"})

    assert exc.value.code == NOT_FOUND
    assert exc.value.message == "Project PVT_x not found"


@pytest.mark.asyncio
async def test_get_project_reshapes_node() -> None:
    client = DummyClient(
        responses=[
            {
                "node": {
                    "id": "PVT_1",
                    "number": 4,
                    "title": "Roadmap",
                    "shortDescription": "Q3",
                    "public": True,
                    "closed": False,
                    "template": False,
                    "creator": {"login": "mona"},
                }
            }
        ]
    )

    out = await ProjectOperations(client).get_project({"projectId": "PVT_1"})

    assert client.graphql_calls[0] == (queries.GET_PROJECT, {"id": "PVT_1"})
    assert out["project"]["short_description"] == "Q3"
    assert out["project"]["creator"] == "mona"


@pytest.mark.asyncio
async def test_list_projects_pages_and_unknown_owner() -> None:
    client = DummyClient(
        responses=[
            {
                "repositoryOwner": {
                    "__typename": "Organization",
                    "projectsV2": {
                        "totalCount": 3,
                        "nodes": [{"id": "PVT_1", "title": "A"}, {"id": "PVT_2", "title": "B"}],
                        "pageInfo": {"hasNextPage": True, "endCursor": "c2"},
                    },
                }
            },
            {"repositoryOwner": None},
        ]
    )
    ops = ProjectOperations(client)

    out = await ops.list_projects({"login": "octo-org", "first": 2})
    missing = await ops.list_projects({"login": "ghost", "first": 20, "after": "c0"})

    assert client.graphql_calls[0][1] == {"login": "octo-org", "first": 2, "after": None}
    assert out["owner_type"] == "Organization"
    assert [p["id"] for p in out["projects"]] == ["PVT_1", "PVT_2"]
    assert out["page_info"] == {"has_next_page": True, "end_cursor": "c2"}
    assert missing["projects"] == []
    assert missing["total_count"] == 0


@pytest.mark.asyncio
async def test_get_project_columns_keeps_single_select_fields() -> None:
    client = DummyClient(
        responses=[
            {
                "node": {
                    "fields": {
                        "nodes": [
                            {"id": "F_1", "name": "Title"},
                            {"id": "F_2", "name": "Status", "options": [{"id": "o1", "name": "Todo"}]},
                            {},
                        ]
                    }
                }
            }
        ]
    )

    out = await ProjectOperations(client).get_project_columns({"projectId": "PVT_1"})

    assert out == {"columns": [{"id": "F_2", "name": "Status", "options": [{"id": "o1", "name": "Todo"}]}]}


@pytest.mark.asyncio
async def test_get_project_fields_includes_iteration_configuration() -> None:
    client = DummyClient(
        responses=[
            {
                "node": {
                    "fields": {
                        "nodes": [
                            {"__typename": "ProjectV2Field", "id": "F_1", "name": "Title", "dataType": "TITLE"},
                            {
                                "__typename": "ProjectV2IterationField",
                                "id": "F_2",
                                "name": "Sprint",
                                "dataType": "ITERATION",
                                "configuration": {
                                    "duration": 14,
                                    "startDay": 1,
                                    "iterations": [
                                        {"id": "it1", "title": "Sprint 1", "startDate": "2024-01-01", "duration": 14}
                                    ],
                                },
                            },
                        ]
                    }
                }
            }
        ]
    )

    out = await ProjectOperations(client).get_project_fields({"projectId": "PVT_1"})

    assert out["fields"][0] == {"id": "F_1", "name": "Title", "type": "ProjectV2Field", "data_type": "TITLE"}
    assert out["fields"][1]["iteration_configuration"]["iterations"][0]["start_date"] == "2024-01-01"


@pytest.mark.asyncio
async def test_get_project_items_filter_applies_to_current_page() -> None:
    def item(item_id: str, status: str) -> dict[str, Any]:
        return {
            "id": item_id,
            "type": "ISSUE",
            "isArchived": False,
            "content": {"__typename": "Issue", "id": f"I_{item_id}", "title": item_id, "state": "OPEN", "number": 1},
            "fieldValues": {
                "nodes": [
                    {
                        "__typename": "ProjectV2ItemFieldSingleSelectValue",
                        "name": status,
                        "optionId": "o",
                        "field": {"id": "F_S", "name": "Status"},
                    },
                    {"__typename": "ProjectV2ItemFieldUserValue"},
                ]
            },
        }

    client = DummyClient(
        responses=[
            {
                "node": {
                    "items": {
                        "totalCount": 10,
                        "nodes": [item("PVTI_1", "In Progress"), item("PVTI_2", "Done")],
                        "pageInfo": {"hasNextPage": True, "endCursor": "c1"},
                    }
                }
            }
        ]
    )

    out = await ProjectOperations(client).get_project_items({"projectId": "PVT_1", "first": 2, "filter": "progress"})

    assert [i["id"] for i in out["items"]] == ["PVTI_1"]
    assert out["items"][0]["field_values"] == [
        {"field_id": "F_S", "field_name": "Status", "value": "In Progress", "option_id": "o"}
    ]
    assert out["items"][0]["content"]["state"] == "open"
    assert out["total_count"] == 10
    assert out["page_info"] == {"has_next_page": True, "end_cursor": "c1"}


# Projects: items


def _update_ok(item_id: str) -> dict[str, Any]:
    return {"updateProjectV2ItemFieldValue": {"projectV2Item": {"id": item_id}}}


@pytest.mark.asyncio
async def test_create_project_item_adds_then_updates_in_order() -> None:
    client = DummyClient(
        responses=[
            {"addProjectV2ItemById": {"item": {"id": "PVTI_9"}}},
            _update_ok("PVTI_9"),
            _update_ok("PVTI_9"),
        ]
    )

    out = await ProjectOperations(client).create_project_item(
        {
            "projectId": "PVT_1",
            "contentId": "I_1",
            "fieldValues": [
                {"fieldId": "F_1", "value": FieldValue("singleSelectOptionId", "o1")},
                {"fieldId": "F_2", "value": FieldValue("number", 3)},
            ],
        }
    )

    assert out == {"item_id": "PVTI_9", "field_values_applied": 2}
    assert [q for q, _ in client.graphql_calls] == [
        queries.ADD_PROJECT_ITEM,
        queries.UPDATE_ITEM_FIELD_VALUE,
        queries.UPDATE_ITEM_FIELD_VALUE,
    ]
    assert client.graphql_calls[0][1] == {"input": {"projectId": "PVT_1", "contentId": "I_1"}}
    assert client.graphql_calls[2][1] == {
        "input": {"projectId": "PVT_1", "itemId": "PVTI_9", "fieldId": "F_2", "value": {"number": 3}}
    }


@pytest.mark.asyncio
async def test_create_project_item_stops_at_first_failed_update() -> None:
    client = DummyClient(
        responses=[
            {"addProjectV2ItemById": {"item": {"id": "PVTI_9"}}},
            _update_ok("PVTI_9"),
            SafeError(code=GITHUB, message="Field not found"),
            _update_ok("PVTI_9"),
        ]
    )

    with pytest.raises(SafeError) as exc:
        await ProjectOperations(client).create_project_item(
            {
                "projectId": "PVT_1",
                "contentId": "I_1",
                "fieldValues": [
                    {"fieldId": "F_1", "value": FieldValue("text", "a")},
                    {"fieldId": "F_2", "value": FieldValue("text", "b")},
                    {"fieldId": "F_3", "value": FieldValue("text", "c")},
                ],
            }
        )

    assert exc.value.message == "Field not found"
    # add + two updates attempted; the third value is never sent.
    assert len(client.graphql_calls) == 3
    assert client.graphql_calls[-1][1]["input"]["fieldId"] == "F_2"


@pytest.mark.asyncio
async def test_create_project_item_without_values_only_adds() -> None:
    client = DummyClient(responses=[{"addProjectV2ItemById": {"item": {"id": "PVTI_9"}}}])

    out = await ProjectOperations(client).create_project_item({"projectId": "PVT_1", "contentId": "I_1"})

    assert out == {"item_id": "PVTI_9", "field_values_applied": 0}
    assert len(client.graphql_calls) == 1


@pytest.mark.asyncio
async def test_update_project_item_field_passes_client_mutation_id() -> None:
    client = DummyClient(responses=[_update_ok("PVTI_1")])

    out = await ProjectOperations(client).update_project_item_field(
        {
            "projectId": "PVT_1",
            "itemId": "PVTI_1",
            "fieldId": "F_1",
            "value": FieldValue("date", "2024-05-01"),
            "clientMutationId": "cm-1",
        }
    )

    assert out == {"success": True, "item_id": "PVTI_1"}
    assert client.graphql_calls[0][1]["input"] == {
        "projectId": "PVT_1",
        "itemId": "PVTI_1",
        "fieldId": "F_1",
        "value": {"date": "2024-05-01"},
        "clientMutationId": "cm-1",
    }


@pytest.mark.asyncio
async def test_bulk_update_reports_per_item_outcomes() -> None:
    client = DummyClient(
        responses=[
            _update_ok("A"),
            SafeError(code=NOT_FOUND, message="Could not resolve to a node with the global id of 'B'"),
            _update_ok("C"),
        ]
    )

    out = await ProjectOperations(client).bulk_update_project_item_field(
        {"projectId": "PVT_1", "itemIds": ["A", "B", "C"], "fieldId": "F_1", "value": FieldValue("text", "x")}
    )

    assert out["succeeded"] == 2
    assert out["failed"] == 1
    assert [r["item_id"] for r in out["results"]] == ["A", "B", "C"]
    assert out["results"][1]["success"] is False
    assert out["results"][1]["error"].startswith("Not Found: ")
    assert [v["input"]["itemId"] for _, v in client.graphql_calls] == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_bulk_update_survives_undecodable_response_for_one_item() -> None:
    attempted: list[str] = []

    async def token() -> str:
        return "tok"

    def handler(request: httpx.Request) -> httpx.Response:
        item_id = json.loads(request.content)["variables"]["input"]["itemId"]
        attempted.append(item_id)
        if item_id == "B":
            return httpx.Response(200, content=b'{"data": "\xff\xfe"}')
        return httpx.Response(200, json={"data": _update_ok(item_id)})

    client = GitHubClient(token_provider=token, limits=LimitsConfig(), transport=httpx.MockTransport(handler))
    out = await ProjectOperations(client).bulk_update_project_item_field(
        {"projectId": "PVT_1", "itemIds": ["A", "B", "C"], "fieldId": "F_1", "value": FieldValue("text", "x")}
    )

    assert attempted == ["A", "B", "C"]
    assert len(out["results"]) == 3
    assert [r["success"] for r in out["results"]] == [True, False, True]
    assert out["results"][1]["error"] == "GitHub API Error: GitHub returned invalid JSON"
    assert out["succeeded"] == 2


@pytest.mark.asyncio
async def test_add_item_to_project_passes_client_mutation_id() -> None:
    client = DummyClient(responses=[{"addProjectV2ItemById": {"item": {"id": "PVTI_3"}}}])

    out = await ProjectOperations(client).add_item_to_project(
        {"projectId": "PVT_1", "contentId": "PR_1", "clientMutationId": "cm-2"}
    )

    assert out == {"item_id": "PVTI_3"}
    assert client.graphql_calls == [
        (queries.ADD_PROJECT_ITEM, {"input": {"projectId": "PVT_1", "contentId": "PR_1", "clientMutationId": "cm-2"}})
    ]


@pytest.mark.asyncio
async def test_add_item_without_item_id_is_github_error() -> None:
    client = DummyClient(responses=[{"addProjectV2ItemById": {"item": None}}])

    with pytest.raises(SafeError) as exc:
        await ProjectOperations(client).add_item_to_project({"projectId": "PVT_1", "contentId": "PR_1"})

    assert exc.value.code == GITHUB


@pytest.mark.asyncio
async def test_update_item_position_without_after_id() -> None:
    client = DummyClient(
        responses=[{"updateProjectV2ItemPosition": {"items": {"nodes": [{"id": "PVTI_2"}, {"id": "PVTI_1"}]}}}]
    )

    out = await ProjectOperations(client).update_item_position({"projectId": "PVT_1", "itemId": "PVTI_2"})

    assert client.graphql_calls[0][1] == {"input": {"projectId": "PVT_1", "itemId": "PVTI_2"}}
    assert out == {"item_id": "PVTI_2", "after_id": None, "item_order": ["PVTI_2", "PVTI_1"]}


@pytest.mark.asyncio
async def test_add_draft_issue_and_convert() -> None:
    client = DummyClient(
        responses=[
            {
                "addProjectV2DraftIssue": {
                    "projectItem": {"id": "PVTI_5", "content": {"__typename": "DraftIssue", "id": "DI_1", "title": "Idea"}}
                }
            },
            {
                "convertProjectV2DraftIssueItemToIssue": {
                    "item": {
                        "id": "PVTI_5",
                        "content": {
                            "__typename": "Issue",
                            "id": "I_5",
                            "title": "Idea",
                            "number": 12,
                            "repository": {"nameWithOwner": "octo/hello"},
                        },
                    }
                }
            },
        ]
    )
    ops = ProjectOperations(client)

    draft = await ops.add_draft_issue({"projectId": "PVT_1", "title": "Idea", "assigneeIds": ["U_1"]})
    issue = await ops.convert_draft_issue({"itemId": "PVTI_5", "repositoryId": "R_1"})

    assert client.graphql_calls[0][1] == {"input": {"projectId": "PVT_1", "title": "Idea", "assigneeIds": ["U_1"]}}
    assert draft == {"item_id": "PVTI_5", "draft_issue": {"type": "DraftIssue", "id": "DI_1", "title": "Idea"}}
    assert issue["issue"]["number"] == 12
    assert issue["issue"]["repository"] == "octo/hello"


@pytest.mark.asyncio
async def test_item_lifecycle_mutations() -> None:
    client = DummyClient(
        responses=[
            {"archiveProjectV2Item": {"item": {"id": "PVTI_1", "isArchived": True}}},
            {"unarchiveProjectV2Item": {"item": {"id": "PVTI_1", "isArchived": False}}},
            {"clearProjectV2ItemFieldValue": {"projectV2Item": {"id": "PVTI_1"}}},
            {"deleteProjectV2Item": {"deletedItemId": "PVTI_1"}},
        ]
    )
    ops = ProjectOperations(client)
    args = {"projectId": "PVT_1", "itemId": "PVTI_1"}

    assert await ops.archive_project_item(args) == {"item_id": "PVTI_1", "archived": True}
    assert await ops.unarchive_project_item(args) == {"item_id": "PVTI_1", "archived": False}
    assert await ops.clear_item_field_value({**args, "fieldId": "F_1"}) == {
        "success": True,
        "item_id": "PVTI_1",
        "field_id": "F_1",
    }
    assert await ops.delete_project_item(args) == {"deleted_item_id": "PVTI_1"}
    assert [q for q, _ in client.graphql_calls] == [
        queries.ARCHIVE_PROJECT_ITEM,
        queries.UNARCHIVE_PROJECT_ITEM,
        queries.CLEAR_ITEM_FIELD_VALUE,
        queries.DELETE_PROJECT_ITEM,
    ]


@pytest.mark.asyncio
async def test_unexpected_mutation_payload_is_github_error() -> None:
    client = DummyClient(responses=[{"deleteProjectV2Item": None}])

    with pytest.raises(SafeError) as exc:
        await ProjectOperations(client).delete_project_item({"projectId": "PVT_1", "itemId": "PVTI_1"})

    assert exc.value.code == GITHUB
    assert exc.value.message == "Unexpected deleteProjectV2Item response"


# Projects: lifecycle


@pytest.mark.asyncio
async def test_project_lifecycle_mutations() -> None:
    client = DummyClient(
        responses=[
            {"createProjectV2": {"projectV2": {"id": "PVT_9", "title": "Sprint 1"}}},
            {"updateProjectV2": {"projectV2": {"id": "PVT_9", "title": "Sprint 1", "closed": True}}},
            {"copyProjectV2": {"projectV2": {"id": "PVT_10", "title": "Sprint 2"}}},
            {"markProjectV2AsTemplate": {"projectV2": {"id": "PVT_9", "title": "Sprint 1", "template": True}}},
            {"unmarkProjectV2AsTemplate": {"projectV2": {"id": "PVT_9", "title": "Sprint 1", "template": False}}},
            {"deleteProjectV2": {"projectV2": {"id": "PVT_9", "title": "Sprint 1"}}},
        ]
    )
    ops = ProjectOperations(client)

    created = await ops.create_project({"ownerId": "O_1", "title": "Sprint 1"})
    updated = await ops.update_project({"projectId": "PVT_9", "closed": True})
    copied = await ops.copy_project(
        {"projectId": "PVT_9", "ownerId": "O_1", "title": "Sprint 2", "includeDraftIssues": False}
    )
    marked = await ops.mark_project_as_template({"projectId": "PVT_9"})
    unmarked = await ops.unmark_project_as_template({"projectId": "PVT_9"})
    deleted = await ops.delete_project({"projectId": "PVT_9"})

    assert created["project"]["id"] == "PVT_9"
    assert updated["project"]["closed"] is True
    assert client.graphql_calls[1][1] == {"input": {"projectId": "PVT_9", "closed": True}}
    assert client.graphql_calls[2][1]["input"]["includeDraftIssues"] is False
    assert copied["project"]["id"] == "PVT_10"
    assert marked["project"]["template"] is True
    assert unmarked["project"]["template"] is False
    assert deleted == {"deleted": True, "project": {"id": "PVT_9", "title": "Sprint 1"}}


@pytest.mark.asyncio
async def test_update_project_requires_a_change() -> None:
    client = DummyClient()

    with pytest.raises(SafeError) as exc:
        await ProjectOperations(client).update_project({"projectId": "PVT_9"})

    assert exc.value.code == VALIDATION
    assert client.graphql_calls == []


@pytest.mark.asyncio
async def test_update_project_status() -> None:
    client = DummyClient(
        responses=[
            {
                "updateProjectV2StatusUpdate": {
                    "statusUpdate": {"id": "SU_1", "status": "AT_RISK", "body": "Slipping", "targetDate": "2024-06-01"}
                }
            }
        ]
    )

    out = await ProjectOperations(client).update_project_status(
        {"statusUpdateId": "SU_1", "status": "AT_RISK", "body": "Slipping"}
    )

    assert client.graphql_calls[0][1] == {"input": {"statusUpdateId": "SU_1", "status": "AT_RISK", "body": "Slipping"}}
    assert out["status_update"]["status"] == "AT_RISK"
    assert out["status_update"]["target_date"] == "2024-06-01"


# Projects: fields


@pytest.mark.asyncio
async def test_create_single_select_field_requires_options() -> None:
    client = DummyClient()

    with pytest.raises(SafeError) as exc:
        await ProjectOperations(client).create_project_field(
            {"projectId": "PVT_1", "dataType": "SINGLE_SELECT", "name": "Priority"}
        )

    assert exc.value.code == VALIDATION
    assert client.graphql_calls == []


@pytest.mark.asyncio
async def test_iteration_configuration_only_for_iteration_fields() -> None:
    client = DummyClient()

    with pytest.raises(SafeError) as exc:
        await ProjectOperations(client).create_project_field(
            {
                "projectId": "PVT_1",
                "dataType": "TEXT",
                "name": "Notes",
                "iterationConfiguration": {"startDate": "2024-01-01", "duration": 14},
            }
        )

    assert "ITERATION" in exc.value.message


@pytest.mark.asyncio
async def test_create_update_delete_project_field() -> None:
    options = [{"name": "High", "description": "", "color": "RED"}]
    client = DummyClient(
        responses=[
            {
                "createProjectV2Field": {
                    "projectV2Field": {
                        "__typename": "ProjectV2SingleSelectField",
                        "id": "F_9",
                        "name": "Priority",
                        "dataType": "SINGLE_SELECT",
                        "options": [{"id": "o1", "name": "High", "color": "RED"}],
                    }
                }
            },
            {"updateProjectV2Field": {"projectV2Field": {"id": "F_9", "name": "Urgency"}}},
            {"deleteProjectV2Field": {"projectV2Field": {"id": "F_9", "name": "Urgency"}}},
        ]
    )
    ops = ProjectOperations(client)

    created = await ops.create_project_field(
        {"projectId": "PVT_1", "dataType": "SINGLE_SELECT", "name": "Priority", "singleSelectOptions": options}
    )
    updated = await ops.update_project_field({"fieldId": "F_9", "name": "Urgency"})
    deleted = await ops.delete_project_field({"fieldId": "F_9"})

    assert client.graphql_calls[0][1] == {
        "input": {"projectId": "PVT_1", "dataType": "SINGLE_SELECT", "name": "Priority", "singleSelectOptions": options}
    }
    assert created["field"]["options"] == [{"id": "o1", "name": "High", "color": "RED"}]
    assert updated["field"]["name"] == "Urgency"
    assert client.graphql_calls[1][1] == {"input": {"fieldId": "F_9", "name": "Urgency"}}
    assert deleted["deleted"] is True
    assert deleted["field"]["id"] == "F_9"


@pytest.mark.asyncio
async def test_update_project_field_requires_a_change() -> None:
    client = DummyClient()

    with pytest.raises(SafeError):
        await ProjectOperations(client).update_project_field({"fieldId": "F_9"})

    assert client.graphql_calls == []
