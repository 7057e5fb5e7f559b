"""
Linear Tools
------------
Linear actions through Composio.
"""

from typing import TYPE_CHECKING, List, Optional

from pydantic import Field

from core.gate import ToolGroup

from .connectors import ConnectorTool, connector_descriptors
from .registry import NoParams, ToolDescriptor, ToolParams

if TYPE_CHECKING:
    from .catalog import ToolContext


class CreateIssueParams(ToolParams):
    project_id: str = Field(description="Identifier of the project to which this issue will be associated.")
    team_id: str = Field(description="Identifier of the team responsible for this issue.")
    title: str = Field(description="The title of the new issue.")
    description: str = Field(description="A detailed description of the issue, which can include markdown formatting.")
    assignee_id: Optional[str] = Field(default=None, description="Identifier of the user to assign to this issue.")
    cycle_id: Optional[str] = Field(
        default=None,
        description="Identifier of the cycle (sprint) to assign this issue to. Only applicable if the team "
                    "has cycles enabled.",
    )
    due_date: Optional[str] = Field(
        default=None,
        description="Target completion date formatted as 'YYYY,MM,DD,hh,mm,ss', e.g. '2024,10,27,12,58,00'.",
    )
    estimate: int = Field(
        default=0,
        description="Estimated effort as a point value (e.g. 1, 2, 3, 5, 8); 0 means no estimate.",
    )
    label_ids: List[str] = Field(default_factory=list, description="Identifiers of labels to add to this issue.")
    parent_id: Optional[str] = Field(default=None, description="Identifier of an existing issue to set as parent.")
    priority: int = Field(
        default=0, ge=0, le=4,
        description="Priority of the issue. 0 (No), 1 (Urgent), 2 (High), 3 (Normal), 4 (Low).",
    )
    state_id: Optional[str] = Field(default=None, description="Identifier of the workflow state to assign.")


class UpdateIssueParams(ToolParams):
    issue_id: str = Field(description="Identifier of the issue to update.")
    assignee_id: Optional[str] = Field(default=None, description="Identifier of the user to assign to the issue.")
    description: Optional[str] = Field(default=None, description="New Markdown description for the issue.")
    due_date: Optional[str] = Field(default=None, description="New due date in 'YYYY,MM,DD,hh,mm,ss' format.")
    estimate: Optional[int] = Field(default=None, description="New time estimate in minutes.")
    label_ids: Optional[List[str]] = Field(
        default=None,
        description="Label identifiers to set; replaces all existing labels. An empty list removes all labels.",
    )
    parent_id: Optional[str] = Field(default=None, description="Identifier of an existing issue to set as parent.")
    priority: Optional[int] = Field(
        default=None, ge=0, le=4,
        description="Priority: 0 (No), 1 (Urgent), 2 (High), 3 (Normal), 4 (Low).",
    )
    project_id: Optional[str] = Field(default=None, description="Identifier of the project to associate.")
    state_id: Optional[str] = Field(default=None, description="Identifier of the new state.")
    team_id: Optional[str] = Field(default=None, description="Identifier of the team to associate.")
    title: Optional[str] = Field(default=None, description="New title for the issue.")


class CreateCommentParams(ToolParams):
    issue_id: str = Field(description="Identifier of the existing Linear issue for the comment.")
    body: str = Field(description="Non-empty comment content, in plain text or Markdown.")


class ListIssuesParams(ToolParams):
    after: Optional[str] = Field(default=None, description="Pagination cursor (`endCursor` of the previous page).")
    assignee_id: Optional[str] = Field(default=None, description="Only return issues assigned to this user.")
    first: int = Field(default=10, ge=1, le=250, description="Number of issues to return.")
    project_id: Optional[str] = Field(default=None, description="Only return issues belonging to this project.")


class TeamIdParams(ToolParams):
    team_id: str = Field(description="The team's unique identifier.")


class ListTeamsParams(ToolParams):
    project_id: str = Field(
        description="Project used to filter the list of projects associated with each retrieved team.",
    )


class ListUsersParams(ToolParams):
    after: Optional[str] = Field(default=None, description="Pagination cursor (`endCursor` of the previous page).")
    first: int = Field(default=50, ge=1, le=250, description="Number of users to return.")


LINEAR_TOOLS = [
    ConnectorTool(
        "linear_create_issue",
        "Creates a new issue in a specified linear project and team, requiring a title and description, and "
        "allowing for optional properties like assignee, state, priority, cycle, and due date.",
        CreateIssueParams,
        action="LINEAR_CREATE_LINEAR_ISSUE",
    ),
    ConnectorTool(
        "linear_update_issue",
        "Updates an existing linear issue using its `issue id`; requires at least one other attribute for "
        "modification, and all provided entity ids (for state, assignee, labels, etc.) must be valid.",
        UpdateIssueParams,
    ),
    ConnectorTool(
        "linear_create_comment",
        "Creates a new comment on a specified linear issue.",
        CreateCommentParams,
        action="LINEAR_CREATE_LINEAR_COMMENT",
    ),
    ConnectorTool(
        "linear_list_issues",
        "Lists non-archived linear issues; if project id is not specified, issues from all accessible projects "
        "are returned. can also filter by assignee id to get issues assigned to a specific user.",
        ListIssuesParams,
        action="LINEAR_LIST_LINEAR_ISSUES",
    ),
    ConnectorTool(
        "linear_list_cycles",
        "Retrieves all cycles (time-boxed iterations for work) from the linear account; no filters are applied.",
        NoParams,
        action="LINEAR_LIST_LINEAR_CYCLES",
    ),
    ConnectorTool(
        "linear_get_cycles_by_team_id",
        "Retrieves all cycles for a specified linear team id; cycles are time-boxed work periods (like sprints) "
        "and the team id must correspond to an existing team.",
        TeamIdParams,
    ),
    ConnectorTool(
        "linear_list_states",
        "Retrieves all workflow states for a specified team in linear, representing the stages an issue "
        "progresses through in that team's workflow.",
        TeamIdParams,
        action="LINEAR_LIST_LINEAR_STATES",
    ),
    ConnectorTool(
        "linear_list_teams",
        "Retrieves all teams, including their members, and filters each team's associated projects by the "
        "provided project id.",
        ListTeamsParams,
        action="LINEAR_LIST_LINEAR_TEAMS",
    ),
    ConnectorTool(
        "linear_list_projects",
        "Retrieves all projects from the linear account.",
        NoParams,
        action="LINEAR_LIST_LINEAR_PROJECTS",
    ),
    ConnectorTool(
        "linear_list_users",
        "Lists all users in the linear workspace with their ids, names, emails, and active status.",
        ListUsersParams,
        action="LINEAR_LIST_LINEAR_USERS",
    ),
]


def descriptors(ctx: "ToolContext") -> List[ToolDescriptor]:
    return connector_descriptors(ctx, "Linear", ToolGroup.LINEAR, LINEAR_TOOLS)
