"""Tool input declarations and argument validation.

Every tool is declared once as a ``ToolSpec``. The same declaration drives:
- the JSON Schema advertised to agents (``TOOL_METADATA``)
- argument validation and coercion before any upstream request is built
- the binding from tool name to operation method

This is intentionally a minimal validator, not a full JSON Schema implementation.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import validation_error

FIELD_VALUE_KINDS: tuple[str, ...] = ("text", "number", "date", "singleSelectOptionId", "iterationId")

_FIELD_VALUE_DESCRIPTIONS = {
    "text": "The text to set on the field.",
    "number": "The number to set on the field.",
    "date": "The ISO 8601 date to set on the field.",
    "singleSelectOptionId": "The id of the single select option to set on the field.",
    "iterationId": "The id of the iteration to set on the field.",
}


@dataclass(frozen=True, slots=True)
class FieldValue:
    """A Projects v2 item field value: exactly one kind, never a sparse object."""

    kind: str
    value: str | int | float

    def to_graphql(self) -> dict[str, Any]:
        """Render as a ``ProjectV2FieldValue`` input object."""
        return {self.kind: self.value}


@dataclass(frozen=True, slots=True)
class Field:
    """Declaration of a single tool argument."""

    type: str
    description: str = ""
    required: bool = False
    default: Any = None
    enum: tuple[str, ...] | None = None
    items: Field | None = None
    properties: Mapping[str, Field] | None = None
    minimum: int | None = None
    maximum: int | None = None
    min_length: int | None = None
    nullable: bool = False
    # Name of a configuration default used when the argument is omitted.
    fallback: str | None = None


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """A tool: its advertised contract and the operation it is bound to."""

    name: str
    description: str
    fields: Mapping[str, Field]
    family: str
    method: str

    def input_schema(self) -> dict[str, Any]:
        """Render the JSON Schema advertised to agents."""
        return _object_schema(self.fields)


def _field_schema(field: Field) -> dict[str, Any]:
    if field.type == "field_value":
        out: dict[str, Any] = {
            "type": "object",
            "properties": {
                kind: {
                    "type": "number" if kind == "number" else "string",
                    "description": _FIELD_VALUE_DESCRIPTIONS[kind],
                }
                for kind in FIELD_VALUE_KINDS
            },
            "minProperties": 1,
            "maxProperties": 1,
            "additionalProperties": False,
        }
    elif field.type == "object" and field.properties is not None:
        out = _object_schema(field.properties)
    else:
        out = {"type": [field.type, "null"] if field.nullable else field.type}

    if field.description:
        out["description"] = field.description
    if field.default is not None:
        out["default"] = field.default
    if field.enum is not None:
        out["enum"] = list(field.enum)
    if field.minimum is not None:
        out["minimum"] = field.minimum
    if field.maximum is not None:
        out["maximum"] = field.maximum
    if field.min_length is not None:
        out["minLength"] = field.min_length
    if field.items is not None:
        out["items"] = _field_schema(field.items)
    return out


def _object_schema(fields: Mapping[str, Field]) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {name: _field_schema(f) for name, f in fields.items()},
        "additionalProperties": False,
    }
    # Fields with a configured fallback may be omitted by the agent.
    required = [name for name, f in fields.items() if f.required and f.fallback is None]
    if required:
        schema["required"] = required
    return schema


def parse_field_value(raw: object, path: str) -> FieldValue:
    """Parse an exactly-one-of field value object into a ``FieldValue``.

    Alternatives set to null are treated as absent. An empty string is a
    populated alternative.
    """
    if not isinstance(raw, Mapping):
        raise validation_error(f"Field '{path}' must be an object")

    extras = sorted(k for k in raw.keys() if k not in FIELD_VALUE_KINDS)
    if extras:
        raise validation_error("Unexpected fields: " + ", ".join(f"{path}.{k}" for k in extras))

    present = [(kind, raw[kind]) for kind in FIELD_VALUE_KINDS if raw.get(kind) is not None]
    if len(present) != 1:
        raise validation_error(
            f"Exactly one value must be provided for '{path}'",
            hint="Set one of: " + ", ".join(FIELD_VALUE_KINDS),
        )

    kind, value = present[0]
    if kind == "number":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise validation_error(f"Field '{path}.number' must be a number")
    elif not isinstance(value, str):
        raise validation_error(f"Field '{path}.{kind}' must be a string")
    return FieldValue(kind=kind, value=value)


def _coerce(field: Field, value: object, path: str) -> Any:
    t = field.type
    if t == "string":
        if not isinstance(value, str):
            raise validation_error(f"Field '{path}' must be a string")
        if field.min_length is not None and len(value) < field.min_length:
            raise validation_error(f"Field '{path}' must be at least {field.min_length} characters")
        if field.enum is not None and value not in field.enum:
            raise validation_error(f"Field '{path}' must be one of: {', '.join(field.enum)}")
        return value

    if t == "integer":
        if isinstance(value, bool):
            raise validation_error(f"Field '{path}' must be an integer")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            raise validation_error(f"Field '{path}' must be an integer")
        if field.minimum is not None and value < field.minimum:
            raise validation_error(f"Field '{path}' must be >= {field.minimum}")
        if field.maximum is not None and value > field.maximum:
            raise validation_error(f"Field '{path}' must be <= {field.maximum}")
        return value

    if t == "number":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise validation_error(f"Field '{path}' must be a number")
        return value

    if t == "boolean":
        if not isinstance(value, bool):
            raise validation_error(f"Field '{path}' must be a boolean")
        return value

    if t == "array":
        if not isinstance(value, list):
            raise validation_error(f"Field '{path}' must be an array")
        if field.items is None:
            return list(value)
        out = []
        for i, item in enumerate(value):
            item_path = f"{path}[{i}]"
            if item is None:
                raise validation_error(f"Field '{item_path}' must not be null")
            out.append(_coerce(field.items, item, item_path))
        return out

    if t == "object":
        if not isinstance(value, Mapping):
            raise validation_error(f"Field '{path}' must be an object")
        if field.properties is None:
            return dict(value)
        return _validate_object(field.properties, value, prefix=f"{path}.", fallbacks={})

    if t == "field_value":
        return parse_field_value(value, path)

    raise validation_error(f"Field '{path}' has an unsupported type")


def _validate_object(
    fields: Mapping[str, Field],
    values: Mapping[str, Any],
    *,
    prefix: str,
    fallbacks: Mapping[str, Any],
) -> dict[str, Any]:
    extras = [k for k in values.keys() if k not in fields]
    if extras:
        raise validation_error("Unexpected fields: " + ", ".join(f"{prefix}{k}" for k in sorted(extras)))

    out: dict[str, Any] = {}
    for name, field in fields.items():
        path = f"{prefix}{name}"
        value = values.get(name)

        if value is None:
            if field.nullable and name in values:
                out[name] = None
                continue
            fallback = fallbacks.get(field.fallback) if field.fallback else None
            if fallback is not None:
                out[name] = fallback
            elif field.required:
                raise validation_error(f"Missing required field: {path}")
            elif field.default is not None:
                out[name] = copy.deepcopy(field.default)
            continue

        out[name] = _coerce(field, value, path)
    return out


def validate_arguments(
    spec: ToolSpec,
    arguments: object,
    fallbacks: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Validate raw tool arguments and return the coerced input.

    The result holds only declared keys, with defaults and fallbacks applied and
    field values parsed into ``FieldValue``.

    Raises:
        SafeError: ``Validation`` naming the offending field.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise validation_error("Arguments must be an object")
    return _validate_object(spec.fields, arguments, prefix="", fallbacks=fallbacks or {})


# Shared argument declarations.

OWNER = Field(
    "string",
    "Repository owner (username or organization). Defaults to GITHUB_OWNER.",
    required=True,
    min_length=1,
    fallback="default_owner",
)
REPO = Field("string", "Repository name", required=True, min_length=1)
ISSUE_NUMBER = Field("integer", "Issue number", required=True, minimum=1)
PER_PAGE = Field("integer", "Items per page (max 100)", default=30, minimum=1, maximum=100)
PAGE = Field("integer", "Page number", default=1, minimum=1)
DIRECTION_ASC = Field("string", "Sort direction", default="asc", enum=("asc", "desc"))
DIRECTION_DESC = Field("string", "Sort direction", default="desc", enum=("asc", "desc"))
STRING_LIST = Field("string")

PROJECT_ID = Field("string", "The ID of the Project.", required=True, min_length=1)
ITEM_ID = Field("string", "The ID of the project item.", required=True, min_length=1)
FIELD_ID = Field("string", "The ID of the project field.", required=True, min_length=1)
FIRST = Field("integer", "Number of results to return (max 100)", default=20, minimum=1, maximum=100)
AFTER = Field("string", "Cursor for pagination")
CLIENT_MUTATION_ID = Field("string", "A unique string identifier for the client performing the mutation.")
FIELD_VALUE = Field(
    "field_value",
    "The value to set. Exactly one of text, number, date, singleSelectOptionId or iterationId.",
    required=True,
)

PROJECT_FIELD_DATA_TYPES = ("TEXT", "NUMBER", "DATE", "SINGLE_SELECT", "ITERATION")
OPTION_COLORS = ("GRAY", "BLUE", "GREEN", "YELLOW", "ORANGE", "RED", "PINK", "PURPLE")
STATUS_UPDATE_STATUSES = ("INACTIVE", "ON_TRACK", "AT_RISK", "OFF_TRACK", "COMPLETE")

SINGLE_SELECT_OPTIONS = Field(
    "array",
    "Options for a single select field.",
    items=Field(
        "object",
        properties={
            "name": Field("string", "The name of the option", required=True, min_length=1),
            "description": Field("string", "The description text of the option", default=""),
            "color": Field("string", "The display color of the option", required=True, enum=OPTION_COLORS),
        },
    ),
)
ITERATION_CONFIGURATION = Field(
    "object",
    "Configuration for an iteration field.",
    properties={
        "startDate": Field("string", "The start date for the first iteration.", required=True),
        "duration": Field("integer", "The duration of each iteration, in days.", required=True, minimum=1),
        "iterations": Field(
            "array",
            "Zero or more iterations for the field.",
            items=Field(
                "object",
                properties={
                    "startDate": Field("string", "The start date for the iteration.", required=True),
                    "duration": Field("integer", "The duration of the iteration, in days.", required=True, minimum=1),
                    "title": Field("string", "The title for the iteration.", required=True),
                },
            ),
        ),
    },
)


TOOL_SPECS: tuple[ToolSpec, ...] = (
    # Repositories
    ToolSpec(
        name="get-repository",
        description="Get details of a GitHub repository.",
        fields={"owner": OWNER, "repo": REPO},
        family="repositories",
        method="get_repository",
    ),
    ToolSpec(
        name="list-repositories",
        description="List repositories for a GitHub user.",
        fields={
            "owner": OWNER,
            "type": Field(
                "string",
                "Type of repositories to list",
                default="all",
                enum=("all", "owner", "public", "private", "member"),
            ),
            "sort": Field(
                "string",
                "Sort field",
                default="full_name",
                enum=("created", "updated", "pushed", "full_name"),
            ),
            "direction": DIRECTION_ASC,
            "per_page": PER_PAGE,
            "page": PAGE,
        },
        family="repositories",
        method="list_repositories",
    ),
    # Issues
    ToolSpec(
        name="get-issue",
        description="Get a single issue by repository and issue number.",
        fields={"owner": OWNER, "repo": REPO, "issueNumber": ISSUE_NUMBER},
        family="issues",
        method="get_issue",
    ),
    ToolSpec(
        name="list-issues",
        description="List issues in a repository (pull requests excluded).",
        fields={
            "owner": OWNER,
            "repo": REPO,
            "state": Field("string", "Issue state", default="open", enum=("open", "closed", "all")),
            "labels": Field("array", "Filter by labels", items=STRING_LIST),
            "assignee": Field("string", "Filter by assignee username"),
            "milestone": Field("string", "Filter by milestone number, '*' or 'none'"),
            "sort": Field("string", "Sort field", default="created", enum=("created", "updated", "comments")),
            "direction": DIRECTION_DESC,
            "per_page": PER_PAGE,
            "page": PAGE,
        },
        family="issues",
        method="list_issues",
    ),
    ToolSpec(
        name="create-issue",
        description="Create a new issue in a repository.",
        fields={
            "owner": OWNER,
            "repo": REPO,
            "title": Field("string", "Issue title", required=True, min_length=1),
            "body": Field("string", "Issue body/description"),
            "assignees": Field("array", "Usernames to assign", items=STRING_LIST),
            "milestone": Field("integer", "Milestone number", minimum=1),
            "labels": Field("array", "Labels to apply", items=STRING_LIST),
        },
        family="issues",
        method="create_issue",
    ),
    ToolSpec(
        name="update-issue",
        description="Update an existing issue.",
        fields={
            "owner": OWNER,
            "repo": REPO,
            "issueNumber": ISSUE_NUMBER,
            "title": Field("string", "New title", min_length=1),
            "body": Field("string", "New body"),
            "state": Field("string", "State (open or closed)", enum=("open", "closed")),
            "assignees": Field("array", "Usernames to assign (replaces existing)", items=STRING_LIST),
            "labels": Field("array", "Labels to apply (replaces existing)", items=STRING_LIST),
            "milestone": Field("integer", "Milestone number (null to clear)", minimum=1, nullable=True),
        },
        family="issues",
        method="update_issue",
    ),
    # Projects: reads
    ToolSpec(
        name="get-project",
        description="Get a GitHub Project (v2) by node ID.",
        fields={"projectId": PROJECT_ID},
        family="projects",
        method="get_project",
    ),
    ToolSpec(
        name="list-projects",
        description="List GitHub Projects (v2) owned by a user or organization.",
        fields={
            "login": Field(
                "string",
                "GitHub user or organization login. Defaults to GITHUB_OWNER.",
                required=True,
                min_length=1,
                fallback="default_owner",
            ),
            "first": FIRST,
            "after": AFTER,
        },
        family="projects",
        method="list_projects",
    ),
    ToolSpec(
        name="get-project-columns",
        description="Get the single-select (status column) fields of a project.",
        fields={"projectId": PROJECT_ID},
        family="projects",
        method="get_project_columns",
    ),
    ToolSpec(
        name="get-project-fields",
        description="Get all fields of a project.",
        fields={"projectId": PROJECT_ID},
        family="projects",
        method="get_project_fields",
    ),
    ToolSpec(
        name="get-project-items",
        description="List items in a project with their field values.",
        fields={
            "projectId": PROJECT_ID,
            "first": FIRST,
            "after": AFTER,
            "filter": Field("string", "Only return items with a field value containing this text (case-insensitive)"),
        },
        family="projects",
        method="get_project_items",
    ),
    # Projects: items
    ToolSpec(
        name="create-project-item",
        description=(
            "Add an issue or pull request to a project, then set field values in order. "
            "Not atomic: a failing field update leaves the item and earlier values in place."
        ),
        fields={
            "projectId": PROJECT_ID,
            "contentId": Field("string", "The node ID of the Issue or Pull Request to add.", required=True, min_length=1),
            "fieldValues": Field(
                "array",
                "Field values to set on the new item.",
                items=Field(
                    "object",
                    properties={"fieldId": FIELD_ID, "value": FIELD_VALUE},
                ),
            ),
        },
        family="projects",
        method="create_project_item",
    ),
    ToolSpec(
        name="update-project-item-field",
        description="Set one field value on a project item.",
        fields={
            "projectId": PROJECT_ID,
            "itemId": ITEM_ID,
            "fieldId": FIELD_ID,
            "value": FIELD_VALUE,
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="update_project_item_field",
    ),
    ToolSpec(
        name="bulk-update-project-item-field",
        description=(
            "Set the same field value on several project items, one at a time. "
            "Returns a per-item result; failures do not stop the remaining items."
        ),
        fields={
            "projectId": PROJECT_ID,
            "itemIds": Field("array", "The IDs of the items to update.", required=True, items=Field("string", min_length=1)),
            "fieldId": FIELD_ID,
            "value": FIELD_VALUE,
        },
        family="projects",
        method="bulk_update_project_item_field",
    ),
    ToolSpec(
        name="add-draft-issue",
        description="Add a draft issue to a project.",
        fields={
            "projectId": PROJECT_ID,
            "title": Field("string", "The title of the draft issue.", required=True, min_length=1),
            "body": Field("string", "The body of the draft issue."),
            "assigneeIds": Field("array", "The node IDs of the assignees.", items=STRING_LIST),
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="add_draft_issue",
    ),
    ToolSpec(
        name="convert-draft-issue",
        description="Convert a draft issue item into a repository issue.",
        fields={
            "itemId": Field("string", "The ID of the draft issue item to convert.", required=True, min_length=1),
            "repositoryId": Field("string", "The node ID of the repository to create the issue in.", required=True, min_length=1),
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="convert_draft_issue",
    ),
    ToolSpec(
        name="add-item-to-project",
        description="Add an existing issue or pull request to a project.",
        fields={
            "projectId": PROJECT_ID,
            "contentId": Field("string", "The node ID of the Issue or Pull Request to add.", required=True, min_length=1),
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="add_item_to_project",
    ),
    ToolSpec(
        name="update-item-position",
        description="Move a project item. Without afterId the item is moved to the top.",
        fields={
            "projectId": PROJECT_ID,
            "itemId": ITEM_ID,
            "afterId": Field("string", "The ID of the item to position this item after."),
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="update_item_position",
    ),
    ToolSpec(
        name="delete-project-item",
        description="Remove an item from a project.",
        fields={"projectId": PROJECT_ID, "itemId": ITEM_ID, "clientMutationId": CLIENT_MUTATION_ID},
        family="projects",
        method="delete_project_item",
    ),
    ToolSpec(
        name="archive-project-item",
        description="Archive a project item.",
        fields={"projectId": PROJECT_ID, "itemId": ITEM_ID, "clientMutationId": CLIENT_MUTATION_ID},
        family="projects",
        method="archive_project_item",
    ),
    ToolSpec(
        name="unarchive-project-item",
        description="Unarchive a project item.",
        fields={"projectId": PROJECT_ID, "itemId": ITEM_ID, "clientMutationId": CLIENT_MUTATION_ID},
        family="projects",
        method="unarchive_project_item",
    ),
    ToolSpec(
        name="clear-item-field-value",
        description="Clear a field value on a project item.",
        fields={
            "projectId": PROJECT_ID,
            "itemId": ITEM_ID,
            "fieldId": FIELD_ID,
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="clear_item_field_value",
    ),
    # Projects: project lifecycle
    ToolSpec(
        name="create-project",
        description="Create a new project.",
        fields={
            "ownerId": Field("string", "The node ID of the user or organization to own the project.", required=True, min_length=1),
            "title": Field("string", "The title of the project.", required=True, min_length=1),
            "repositoryId": Field("string", "The repository to link the project to."),
            "teamId": Field("string", "The team to link the project to."),
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="create_project",
    ),
    ToolSpec(
        name="update-project",
        description="Update a project's title, description, visibility or state.",
        fields={
            "projectId": PROJECT_ID,
            "title": Field("string", "Set the title of the project.", min_length=1),
            "shortDescription": Field("string", "Set the short description of the project."),
            "readme": Field("string", "Set the readme of the project."),
            "public": Field("boolean", "Set the project to public or private."),
            "closed": Field("boolean", "Set the project to closed or open."),
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="update_project",
    ),
    ToolSpec(
        name="delete-project",
        description="Delete a project.",
        fields={"projectId": PROJECT_ID, "clientMutationId": CLIENT_MUTATION_ID},
        family="projects",
        method="delete_project",
    ),
    ToolSpec(
        name="copy-project",
        description="Copy a project to a new owner.",
        fields={
            "projectId": Field("string", "The ID of the source project.", required=True, min_length=1),
            "ownerId": Field("string", "The node ID of the owner of the new project.", required=True, min_length=1),
            "title": Field("string", "The title of the new project.", required=True, min_length=1),
            "includeDraftIssues": Field("boolean", "Include draft issues in the new project.", default=False),
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="copy_project",
    ),
    ToolSpec(
        name="mark-project-as-template",
        description="Mark a project as a template.",
        fields={"projectId": PROJECT_ID, "clientMutationId": CLIENT_MUTATION_ID},
        family="projects",
        method="mark_project_as_template",
    ),
    ToolSpec(
        name="unmark-project-as-template",
        description="Unmark a project as a template.",
        fields={"projectId": PROJECT_ID, "clientMutationId": CLIENT_MUTATION_ID},
        family="projects",
        method="unmark_project_as_template",
    ),
    ToolSpec(
        name="update-project-status",
        description="Update a project status update.",
        fields={
            "statusUpdateId": Field("string", "The ID of the status update.", required=True, min_length=1),
            "body": Field("string", "The body of the status update."),
            "startDate": Field("string", "The start date of the status update."),
            "targetDate": Field("string", "The target date of the status update."),
            "status": Field("string", "The status of the status update.", enum=STATUS_UPDATE_STATUSES),
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="update_project_status",
    ),
    # Projects: fields
    ToolSpec(
        name="create-project-field",
        description="Create a custom field in a project.",
        fields={
            "projectId": PROJECT_ID,
            "dataType": Field("string", "The data type of the field.", required=True, enum=PROJECT_FIELD_DATA_TYPES),
            "name": Field("string", "The name of the field.", required=True, min_length=1),
            "singleSelectOptions": SINGLE_SELECT_OPTIONS,
            "iterationConfiguration": ITERATION_CONFIGURATION,
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="create_project_field",
    ),
    ToolSpec(
        name="update-project-field",
        description="Update a project field. Single select options, when given, replace the existing options.",
        fields={
            "fieldId": FIELD_ID,
            "name": Field("string", "The new name of the field.", min_length=1),
            "singleSelectOptions": SINGLE_SELECT_OPTIONS,
            "iterationConfiguration": ITERATION_CONFIGURATION,
            "clientMutationId": CLIENT_MUTATION_ID,
        },
        family="projects",
        method="update_project_field",
    ),
    ToolSpec(
        name="delete-project-field",
        description="Delete a project field.",
        fields={"fieldId": FIELD_ID, "clientMutationId": CLIENT_MUTATION_ID},
        family="projects",
        method="delete_project_field",
    ),
)

TOOL_SPECS_BY_NAME: dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_SPECS}

TOOL_METADATA: dict[str, dict[str, Any]] = {
    spec.name: {"description": spec.description, "inputSchema": spec.input_schema()} for spec in TOOL_SPECS
}
