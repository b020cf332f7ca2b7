"""Sprint-planning prompt templates."""

from __future__ import annotations

from dataclasses import dataclass

from mcp.types import GetPromptResult, Prompt, PromptArgument, PromptMessage, TextContent

_FALSE_FLAGS = frozenset({"false", "no", "0"})


@dataclass(frozen=True, slots=True)
class PromptArg:
    """A prompt argument and the line it contributes when supplied.

    ``line`` without a ``{value}`` placeholder is a flag: it is rendered when the
    argument is set to anything other than false/no/0.
    """

    name: str
    description: str
    line: str
    required: bool = False


@dataclass(frozen=True, slots=True)
class PromptSpec:
    name: str
    description: str
    header: str
    arguments: tuple[PromptArg, ...]

    def to_prompt(self) -> Prompt:
        return Prompt(
            name=self.name,
            description=self.description,
            arguments=[
                PromptArgument(name=a.name, description=a.description, required=a.required)
                for a in self.arguments
            ],
        )

    def render(self, arguments: dict[str, str] | None) -> str:
        values = arguments or {}
        lines = [self.header]
        for arg in self.arguments:
            value = values.get(arg.name)
            if value is None or not str(value).strip():
                if arg.required:
                    raise ValueError(f"Missing required argument: {arg.name}")
                continue
            if "{value}" in arg.line:
                lines.append(arg.line.format(value=value))
            elif str(value).strip().lower() not in _FALSE_FLAGS:
                lines.append(arg.line)
        return "\n".join(lines)


PROMPT_SPECS: tuple[PromptSpec, ...] = (
    PromptSpec(
        name="create-sprint-project",
        description="Create a new sprint (iteration) project for agile development.",
        header="Create a new Sprint (iteration) project for Agile development with the following details:",
        arguments=(
            PromptArg("sprintName", "Name of the sprint (e.g., 'Sprint 23', 'Q2 Sprint 1')", "- Sprint Name: {value}", True),
            PromptArg("startDate", "Start date of the sprint (ISO format)", "- Start Date: {value}", True),
            PromptArg("duration", "Duration of sprint in days (typically 7, 14, or 30)", "- Duration: {value} days", True),
            PromptArg("goals", "Primary goals for this sprint", "- Goals: {value}"),
        ),
    ),
    PromptSpec(
        name="manage-sprint-backlog",
        description="Organize and prioritize issues in a sprint backlog.",
        header="Organize and prioritize issues in the sprint backlog:",
        arguments=(
            PromptArg("projectId", "GitHub Project ID to manage", "- Project ID: {value}", True),
            PromptArg("filterStatus", "Filter issues by status (e.g., 'Todo', 'In Progress')", "- Filter Status: {value}"),
            PromptArg(
                "prioritizationStrategy",
                "Strategy for prioritization (e.g., 'value-based', 'effort-based')",
                "- Prioritization Strategy: {value}",
            ),
        ),
    ),
    PromptSpec(
        name="track-sprint-progress",
        description="Generate a status report of the current sprint progress.",
        header="Generate a status report of the current sprint progress:",
        arguments=(
            PromptArg("projectId", "GitHub Project ID to track", "- Project ID: {value}", True),
            PromptArg("includeBurndown", "Whether to include burndown metrics", "- Include burndown metrics"),
            PromptArg("highlightBlockers", "Whether to highlight blocked issues", "- Highlight blocked issues"),
        ),
    ),
    PromptSpec(
        name="prepare-sprint-retrospective",
        description="Prepare a retrospective report and plan the next sprint.",
        header="Prepare a retrospective report and plan for the next sprint:",
        arguments=(
            PromptArg(
                "completedProjectId",
                "GitHub Project ID of the completed sprint",
                "- Completed Project ID: {value}",
                True,
            ),
            PromptArg(
                "includeMetrics",
                "Include completion metrics and statistics",
                "- Include completion metrics and statistics",
            ),
            PromptArg(
                "createNextSprint",
                "Automatically create next sprint project",
                "- Automatically create next sprint project",
            ),
        ),
    ),
    PromptSpec(
        name="create-project-template",
        description="Create a reusable project template for future sprints.",
        header="Create a reusable project template for future sprints:",
        arguments=(
            PromptArg("templateName", "Name for the template", "- Template Name: {value}", True),
            PromptArg(
                "customFields",
                "Custom fields to include (e.g., 'Story Points', 'Priority')",
                "- Custom Fields: {value}",
            ),
            PromptArg(
                "statusColumns",
                "Status columns to create (e.g., 'Todo,In Progress,Review,Done')",
                "- Status Columns: {value}",
            ),
        ),
    ),
)

PROMPT_SPECS_BY_NAME: dict[str, PromptSpec] = {p.name: p for p in PROMPT_SPECS}


def list_prompt_definitions() -> list[Prompt]:
    """Return every prompt as an MCP ``Prompt``."""
    return [p.to_prompt() for p in PROMPT_SPECS]


def render_prompt(name: str, arguments: dict[str, str] | None) -> GetPromptResult:
    """Render a prompt into a single user message.

    Raises:
        ValueError: Unknown prompt or missing required argument.
    """
    spec = PROMPT_SPECS_BY_NAME.get(name)
    if spec is None:
        raise ValueError(f"Unknown prompt: {name}")
    return GetPromptResult(
        description=spec.description,
        messages=[
            PromptMessage(role="user", content=TextContent(type="text", text=spec.render(arguments))),
        ],
    )
