"""Projects (v2) operations.

Projects v2 has no REST surface, so every operation here is a single GraphQL
document from ``queries``. The exceptions are ``create_project_item`` (one add
followed by one field update per supplied value) and
``bulk_update_project_item_field`` (one update per item id).
"""

from __future__ import annotations

import logging
from typing import Any

from . import queries
from .bulk import run_bulk
from .errors import GITHUB, NOT_FOUND, SafeError, validation_error
from .github_client import GitHubClient
from .schemas import FieldValue

logger = logging.getLogger(__name__)

_ITEM_VALUE_KEYS = {
    "ProjectV2ItemFieldTextValue": "text",
    "ProjectV2ItemFieldNumberValue": "number",
    "ProjectV2ItemFieldDateValue": "date",
    "ProjectV2ItemFieldSingleSelectValue": "name",
    "ProjectV2ItemFieldIterationValue": "title",
}


def _mutation_input(args: dict[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    return {k: args[k] for k in keys if args.get(k) is not None}


def _nodes(connection: object) -> list[dict[str, Any]]:
    if not isinstance(connection, dict) or not isinstance(connection.get("nodes"), list):
        return []
    return [n for n in connection["nodes"] if isinstance(n, dict)]


def _page_info(connection: dict[str, Any]) -> dict[str, Any]:
    info = connection.get("pageInfo") if isinstance(connection.get("pageInfo"), dict) else {}
    return {"has_next_page": bool(info.get("hasNextPage")), "end_cursor": info.get("endCursor")}


def _mutation_payload(data: dict[str, Any], mutation: str, key: str) -> Any:
    payload = data.get(mutation)
    if not isinstance(payload, dict) or key not in payload:
        raise SafeError(code=GITHUB, message=f"Unexpected {mutation} response")
    return payload[key]


def _project_node(data: dict[str, Any], project_id: str) -> dict[str, Any]:
    node = data.get("node")
    # A node of another type matches no fragment and comes back empty.
    if not isinstance(node, dict) or not node:
        raise SafeError(code=NOT_FOUND, message=f"Project {project_id} not found")
    return node


def project_from_graphql(project: dict[str, Any]) -> dict[str, Any]:
    creator = project.get("creator")
    return {
        "id": project.get("id"),
        "number": project.get("number"),
        "title": project.get("title"),
        "short_description": project.get("shortDescription"),
        "url": project.get("url"),
        "public": project.get("public"),
        "closed": project.get("closed"),
        "template": project.get("template"),
        "creator": creator.get("login") if isinstance(creator, dict) else None,
        "created_at": project.get("createdAt"),
        "updated_at": project.get("updatedAt"),
    }


def field_from_graphql(field: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": field.get("id"),
        "name": field.get("name"),
        "type": field.get("__typename"),
        "data_type": field.get("dataType"),
    }
    if isinstance(field.get("options"), list):
        out["options"] = field["options"]
    configuration = field.get("configuration")
    if isinstance(configuration, dict):
        out["iteration_configuration"] = {
            "duration": configuration.get("duration"),
            "start_day": configuration.get("startDay"),
            "iterations": [
                {
                    "id": it.get("id"),
                    "title": it.get("title"),
                    "start_date": it.get("startDate"),
                    "duration": it.get("duration"),
                }
                for it in configuration.get("iterations") or []
                if isinstance(it, dict)
            ],
        }
    return out


def _item_field_values(item: dict[str, Any]) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for node in _nodes(item.get("fieldValues")):
        value_key = _ITEM_VALUE_KEYS.get(node.get("__typename"))
        field = node.get("field")
        if value_key is None or not isinstance(field, dict):
            continue
        entry: dict[str, Any] = {
            "field_id": field.get("id"),
            "field_name": field.get("name"),
            "value": node.get(value_key),
        }
        if "optionId" in node:
            entry["option_id"] = node["optionId"]
        if "iterationId" in node:
            entry["iteration_id"] = node["iterationId"]
            entry["start_date"] = node.get("startDate")
            entry["duration"] = node.get("duration")
        out.append(entry)
    return out


def _item_content(content: object) -> dict[str, Any] | None:
    if not isinstance(content, dict) or not content:
        return None
    repository = content.get("repository")
    out = {
        "type": content.get("__typename"),
        "id": content.get("id"),
        "title": content.get("title"),
    }
    for key in ("number", "url", "body"):
        if key in content:
            out[key] = content[key]
    if "state" in content:
        out["state"] = content["state"].lower() if isinstance(content["state"], str) else None
    if isinstance(repository, dict):
        out["repository"] = repository.get("nameWithOwner")
    return out


def item_from_graphql(item: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": item.get("id"),
        "type": item.get("type"),
        "is_archived": item.get("isArchived"),
        "created_at": item.get("createdAt"),
        "updated_at": item.get("updatedAt"),
        "content": _item_content(item.get("content")),
        "field_values": _item_field_values(item),
    }


def _matches_filter(item: dict[str, Any], needle: str) -> bool:
    needle = needle.lower()
    for fv in item["field_values"]:
        value = fv.get("value")
        if value is not None and needle in str(value).lower():
            return True
    return False


class ProjectOperations:
    """Projects v2 reads and mutations."""

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    # Reads

    async def get_project(self, args: dict[str, Any]) -> dict[str, Any]:
        data = await self._client.graphql_call(queries.GET_PROJECT, {"id": args["projectId"]})
        return {"project": project_from_graphql(_project_node(data, args["projectId"]))}

    async def list_projects(self, args: dict[str, Any]) -> dict[str, Any]:
        """List projects for a user or an organization login."""
        login = args["login"]
        data = await self._client.graphql_call(
            queries.LIST_PROJECTS,
            {"login": login, "first": args.get("first", 20), "after": args.get("after")},
        )
        owner = data.get("repositoryOwner")
        connection = owner.get("projectsV2") if isinstance(owner, dict) else None
        if not isinstance(connection, dict):
            return {
                "login": login,
                "owner_type": None,
                "total_count": 0,
                "projects": [],
                "page_info": {"has_next_page": False, "end_cursor": None},
            }
        return {
            "login": login,
            "owner_type": owner.get("__typename"),
            "total_count": connection.get("totalCount"),
            "projects": [project_from_graphql(p) for p in _nodes(connection)],
            "page_info": _page_info(connection),
        }

    async def get_project_columns(self, args: dict[str, Any]) -> dict[str, Any]:
        """Single-select fields, which back board columns such as Status."""
        data = await self._client.graphql_call(queries.GET_PROJECT_COLUMNS, {"id": args["projectId"]})
        node = _project_node(data, args["projectId"])
        columns = [
            {"id": f.get("id"), "name": f.get("name"), "options": f["options"]}
            for f in _nodes(node.get("fields"))
            if isinstance(f.get("options"), list)
        ]
        return {"columns": columns}

    async def get_project_fields(self, args: dict[str, Any]) -> dict[str, Any]:
        data = await self._client.graphql_call(queries.GET_PROJECT_FIELDS, {"id": args["projectId"]})
        node = _project_node(data, args["projectId"])
        return {"fields": [field_from_graphql(f) for f in _nodes(node.get("fields")) if f]}

    async def get_project_items(self, args: dict[str, Any]) -> dict[str, Any]:
        """One page of items. ``filter`` applies to that page only."""
        data = await self._client.graphql_call(
            queries.GET_PROJECT_ITEMS,
            {"id": args["projectId"], "first": args.get("first", 20), "after": args.get("after")},
        )
        node = _project_node(data, args["projectId"])
        connection = node.get("items") if isinstance(node.get("items"), dict) else {}
        items = [item_from_graphql(i) for i in _nodes(connection)]
        if args.get("filter"):
            items = [i for i in items if _matches_filter(i, args["filter"])]
        return {
            "total_count": connection.get("totalCount"),
            "items": items,
            "page_info": _page_info(connection),
        }

    # Items

    async def _add_item(self, project_id: str, content_id: str, client_mutation_id: str | None = None) -> str:
        payload: dict[str, Any] = {"projectId": project_id, "contentId": content_id}
        if client_mutation_id is not None:
            payload["clientMutationId"] = client_mutation_id
        data = await self._client.graphql_call(queries.ADD_PROJECT_ITEM, {"input": payload})
        item = _mutation_payload(data, "addProjectV2ItemById", "item")
        if not isinstance(item, dict) or not isinstance(item.get("id"), str):
            raise SafeError(code=GITHUB, message="Unexpected addProjectV2ItemById response")
        return item["id"]

    async def _set_field_value(
        self,
        project_id: str,
        item_id: str,
        field_id: str,
        value: FieldValue,
        client_mutation_id: str | None = None,
    ) -> str | None:
        payload: dict[str, Any] = {
            "projectId": project_id,
            "itemId": item_id,
            "fieldId": field_id,
            "value": value.to_graphql(),
        }
        if client_mutation_id is not None:
            payload["clientMutationId"] = client_mutation_id
        data = await self._client.graphql_call(queries.UPDATE_ITEM_FIELD_VALUE, {"input": payload})
        item = _mutation_payload(data, "updateProjectV2ItemFieldValue", "projectV2Item")
        return item.get("id") if isinstance(item, dict) else None

    async def create_project_item(self, args: dict[str, Any]) -> dict[str, Any]:
        """Add content to a project, then apply each field value in order.

        Not atomic: if an update fails its error propagates, the item and the
        values already applied stay in place, and later values are not attempted.
        """
        project_id = args["projectId"]
        item_id = await self._add_item(project_id, args["contentId"])
        field_values = args.get("fieldValues") or []
        for index, entry in enumerate(field_values):
            logger.debug("Setting field %s on item %s (%s/%s)", entry["fieldId"], item_id, index + 1, len(field_values))
            await self._set_field_value(project_id, item_id, entry["fieldId"], entry["value"])
        return {"item_id": item_id, "field_values_applied": len(field_values)}

    async def update_project_item_field(self, args: dict[str, Any]) -> dict[str, Any]:
        item_id = await self._set_field_value(
            args["projectId"],
            args["itemId"],
            args["fieldId"],
            args["value"],
            args.get("clientMutationId"),
        )
        return {"success": True, "item_id": item_id or args["itemId"]}

    async def bulk_update_project_item_field(self, args: dict[str, Any]) -> dict[str, Any]:
        """Apply one field value to each item id in turn, collecting per-item results."""
        project_id, field_id, value = args["projectId"], args["fieldId"], args["value"]

        async def update_one(item_id: str) -> None:
            await self._set_field_value(project_id, item_id, field_id, value)

        results = await run_bulk(args["itemIds"], update_one)
        succeeded = sum(1 for r in results if r.success)
        return {
            "results": [r.to_dict() for r in results],
            "succeeded": succeeded,
            "failed": len(results) - succeeded,
        }

    async def add_item_to_project(self, args: dict[str, Any]) -> dict[str, Any]:
        item_id = await self._add_item(args["projectId"], args["contentId"], args.get("clientMutationId"))
        return {"item_id": item_id}

    async def add_draft_issue(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = _mutation_input(args, ("projectId", "title", "body", "assigneeIds", "clientMutationId"))
        data = await self._client.graphql_call(queries.ADD_DRAFT_ISSUE, {"input": payload})
        item = _mutation_payload(data, "addProjectV2DraftIssue", "projectItem") or {}
        return {"item_id": item.get("id"), "draft_issue": _item_content(item.get("content"))}

    async def convert_draft_issue(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = _mutation_input(args, ("itemId", "repositoryId", "clientMutationId"))
        data = await self._client.graphql_call(queries.CONVERT_DRAFT_ISSUE, {"input": payload})
        item = _mutation_payload(data, "convertProjectV2DraftIssueItemToIssue", "item") or {}
        return {"item_id": item.get("id"), "issue": _item_content(item.get("content"))}

    async def update_item_position(self, args: dict[str, Any]) -> dict[str, Any]:
        """Move an item after ``afterId``; without it the item moves to the top."""
        payload = _mutation_input(args, ("projectId", "itemId", "afterId", "clientMutationId"))
        data = await self._client.graphql_call(queries.UPDATE_ITEM_POSITION, {"input": payload})
        items = _mutation_payload(data, "updateProjectV2ItemPosition", "items")
        return {
            "item_id": args["itemId"],
            "after_id": args.get("afterId"),
            "item_order": [n.get("id") for n in _nodes(items)],
        }

    async def delete_project_item(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = _mutation_input(args, ("projectId", "itemId", "clientMutationId"))
        data = await self._client.graphql_call(queries.DELETE_PROJECT_ITEM, {"input": payload})
        return {"deleted_item_id": _mutation_payload(data, "deleteProjectV2Item", "deletedItemId")}

    async def _set_archived(self, args: dict[str, Any], query: str, mutation: str) -> dict[str, Any]:
        payload = _mutation_input(args, ("projectId", "itemId", "clientMutationId"))
        data = await self._client.graphql_call(query, {"input": payload})
        item = _mutation_payload(data, mutation, "item") or {}
        return {"item_id": item.get("id", args["itemId"]), "archived": item.get("isArchived")}

    async def archive_project_item(self, args: dict[str, Any]) -> dict[str, Any]:
        return await self._set_archived(args, queries.ARCHIVE_PROJECT_ITEM, "archiveProjectV2Item")

    async def unarchive_project_item(self, args: dict[str, Any]) -> dict[str, Any]:
        return await self._set_archived(args, queries.UNARCHIVE_PROJECT_ITEM, "unarchiveProjectV2Item")

    async def clear_item_field_value(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = _mutation_input(args, ("projectId", "itemId", "fieldId", "clientMutationId"))
        data = await self._client.graphql_call(queries.CLEAR_ITEM_FIELD_VALUE, {"input": payload})
        item = _mutation_payload(data, "clearProjectV2ItemFieldValue", "projectV2Item") or {}
        return {"success": True, "item_id": item.get("id", args["itemId"]), "field_id": args["fieldId"]}

    # Projects

    async def create_project(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = _mutation_input(args, ("ownerId", "title", "repositoryId", "teamId", "clientMutationId"))
        data = await self._client.graphql_call(queries.CREATE_PROJECT, {"input": payload})
        return {"project": project_from_graphql(_mutation_payload(data, "createProjectV2", "projectV2") or {})}

    async def update_project(self, args: dict[str, Any]) -> dict[str, Any]:
        changes = ("title", "shortDescription", "readme", "public", "closed")
        if not any(args.get(k) is not None for k in changes):
            raise validation_error("No fields to update", hint="Provide at least one of: " + ", ".join(changes))
        payload = _mutation_input(args, ("projectId", *changes, "clientMutationId"))
        data = await self._client.graphql_call(queries.UPDATE_PROJECT, {"input": payload})
        return {"project": project_from_graphql(_mutation_payload(data, "updateProjectV2", "projectV2") or {})}

    async def delete_project(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = _mutation_input(args, ("projectId", "clientMutationId"))
        data = await self._client.graphql_call(queries.DELETE_PROJECT, {"input": payload})
        project = _mutation_payload(data, "deleteProjectV2", "projectV2") or {}
        return {"deleted": True, "project": {"id": project.get("id"), "title": project.get("title")}}

    async def copy_project(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = _mutation_input(args, ("projectId", "ownerId", "title", "includeDraftIssues", "clientMutationId"))
        data = await self._client.graphql_call(queries.COPY_PROJECT, {"input": payload})
        return {"project": project_from_graphql(_mutation_payload(data, "copyProjectV2", "projectV2") or {})}

    async def _set_template(self, args: dict[str, Any], query: str, mutation: str) -> dict[str, Any]:
        payload = _mutation_input(args, ("projectId", "clientMutationId"))
        data = await self._client.graphql_call(query, {"input": payload})
        project = _mutation_payload(data, mutation, "projectV2") or {}
        return {
            "project": {
                "id": project.get("id"),
                "title": project.get("title"),
                "template": project.get("template"),
            }
        }

    async def mark_project_as_template(self, args: dict[str, Any]) -> dict[str, Any]:
        return await self._set_template(args, queries.MARK_PROJECT_AS_TEMPLATE, "markProjectV2AsTemplate")

    async def unmark_project_as_template(self, args: dict[str, Any]) -> dict[str, Any]:
        return await self._set_template(args, queries.UNMARK_PROJECT_AS_TEMPLATE, "unmarkProjectV2AsTemplate")

    async def update_project_status(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = _mutation_input(
            args, ("statusUpdateId", "body", "startDate", "targetDate", "status", "clientMutationId")
        )
        data = await self._client.graphql_call(queries.UPDATE_PROJECT_STATUS, {"input": payload})
        status = _mutation_payload(data, "updateProjectV2StatusUpdate", "statusUpdate") or {}
        return {
            "status_update": {
                "id": status.get("id"),
                "body": status.get("body"),
                "status": status.get("status"),
                "start_date": status.get("startDate"),
                "target_date": status.get("targetDate"),
                "updated_at": status.get("updatedAt"),
            }
        }

    # Fields

    async def create_project_field(self, args: dict[str, Any]) -> dict[str, Any]:
        data_type = args["dataType"]
        if data_type == "SINGLE_SELECT" and not args.get("singleSelectOptions"):
            raise validation_error("Field 'singleSelectOptions' must have at least one option for SINGLE_SELECT fields")
        if args.get("iterationConfiguration") is not None and data_type != "ITERATION":
            raise validation_error("Field 'iterationConfiguration' is only valid for ITERATION fields")

        payload = _mutation_input(
            args,
            ("projectId", "dataType", "name", "singleSelectOptions", "iterationConfiguration", "clientMutationId"),
        )
        data = await self._client.graphql_call(queries.CREATE_PROJECT_FIELD, {"input": payload})
        return {"field": field_from_graphql(_mutation_payload(data, "createProjectV2Field", "projectV2Field") or {})}

    async def update_project_field(self, args: dict[str, Any]) -> dict[str, Any]:
        """Options, when supplied, replace the field's existing options."""
        changes = ("name", "singleSelectOptions", "iterationConfiguration")
        if not any(args.get(k) is not None for k in changes):
            raise validation_error("No fields to update", hint="Provide at least one of: " + ", ".join(changes))
        payload = _mutation_input(args, ("fieldId", *changes, "clientMutationId"))
        data = await self._client.graphql_call(queries.UPDATE_PROJECT_FIELD, {"input": payload})
        return {"field": field_from_graphql(_mutation_payload(data, "updateProjectV2Field", "projectV2Field") or {})}

    async def delete_project_field(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = _mutation_input(args, ("fieldId", "clientMutationId"))
        data = await self._client.graphql_call(queries.DELETE_PROJECT_FIELD, {"input": payload})
        field = _mutation_payload(data, "deleteProjectV2Field", "projectV2Field") or {}
        return {"deleted": True, "field": field_from_graphql(field)}
