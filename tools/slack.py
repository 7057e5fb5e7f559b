"""
Slack Tools
-----------
Slack actions through Composio.
"""

from typing import TYPE_CHECKING, List, Optional

from pydantic import Field

from core.gate import ToolGroup

from .connectors import ConnectorTool, connector_descriptors
from .registry import ToolDescriptor, ToolParams

if TYPE_CHECKING:
    from .catalog import ToolContext


class FetchConversationHistoryParams(ToolParams):
    channel: str = Field(
        description="The ID of the public channel, private channel, direct message, or multi-person direct "
                    "message to fetch history from.",
    )
    cursor: Optional[str] = Field(default=None, description="Pagination cursor from `next_cursor` of a previous response.")
    inclusive: Optional[bool] = Field(
        default=None,
        description="Include messages with `latest` or `oldest` timestamps; applies only when either is specified.",
    )
    latest: Optional[str] = Field(default=None, description="End of the time range (Unix or Slack timestamp).")
    limit: Optional[int] = Field(default=None, description="Maximum number of messages to return per page (1-1000).")
    oldest: Optional[str] = Field(default=None, description="Start of the time range (Unix or Slack timestamp).")


class ListChannelsParams(ToolParams):
    channel_name: Optional[str] = Field(
        default=None,
        description="Filter channels by name (case-insensitive partial match).",
    )
    cursor: Optional[str] = Field(default=None, description="Pagination cursor for the next page of results.")
    exclude_archived: Optional[bool] = Field(default=None, description="Excludes archived channels if true.")
    limit: int = Field(
        default=1,
        description="Maximum number of channels to return per page (1 to 1000). Defaults to 1 if omitted.",
    )
    types: Optional[str] = Field(
        default=None,
        description="Comma-separated channel types: `public_channel`, `private_channel`, `mpim`, `im`.",
    )


class SearchMessagesParams(ToolParams):
    query: str = Field(
        description="Search query, supporting modifiers like `in:#channel`, `from:@user`, `has::star:`, "
                    "or `before:YYYY-MM-DD`.",
    )
    count: int = Field(default=1, description="Number of messages to return per page. Maximum value is 100.")
    highlight: Optional[bool] = Field(default=None, description="Enable highlighting of search terms in results.")
    page: Optional[int] = Field(default=None, description="Page number of results to return.")
    sort: Optional[str] = Field(default=None, description="Sort by `score` (relevance) or `timestamp`.")
    sort_dir: Optional[str] = Field(default=None, description="Sort direction: `asc` or `desc`.")


class SendMessageParams(ToolParams):
    channel: str = Field(
        description="The ID or name of the channel, private group, or IM channel to send the message to "
                    "(e.g. 'C1234567890' or '#general').",
    )
    as_user: Optional[bool] = Field(default=None, description="Post as the authenticated user instead of as a bot.")
    attachments: Optional[str] = Field(default=None, description="URL-encoded JSON array of message attachments.")
    blocks: Optional[str] = Field(default=None, description="URL-encoded JSON array of layout blocks.")
    icon_emoji: Optional[str] = Field(default=None, description="Emoji for bot's icon (e.g. ':robot_face:').")
    icon_url: Optional[str] = Field(default=None, description="Image URL for bot's icon (must be HTTPS).")
    link_names: Optional[bool] = Field(default=None, description="Hyperlink channel names and usernames in text.")
    mrkdwn: Optional[bool] = Field(default=None, description="Disable Slack's markdown for `text` if false.")
    parse: Optional[str] = Field(default=None, description="Message text parsing behavior: `none` or `full`.")
    reply_broadcast: Optional[bool] = Field(default=None, description="Also post a threaded reply to the channel.")
    text: Optional[str] = Field(
        default=None,
        description="Message text content. If not provided, `blocks` or `attachments` must be provided.",
    )
    thread_ts: Optional[str] = Field(default=None, description="Timestamp of parent message to create a thread reply.")
    unfurl_links: Optional[bool] = Field(default=None, description="Enable automatic link unfurling.")
    unfurl_media: Optional[bool] = Field(default=None, description="Enable automatic media unfurling.")
    username: Optional[str] = Field(default=None, description="Bot username displayed in messages.")


class UpdateMessageParams(ToolParams):
    channel: str = Field(description="The ID of the channel containing the message to be updated.")
    ts: str = Field(description="Timestamp of the message to update (e.g. '1234567890.123456').")
    as_user: Optional[str] = Field(default=None, description="Set to 'true' to update as the authenticated user.")
    attachments: Optional[str] = Field(
        default=None,
        description="URL-encoded JSON array of attachments; replaces existing ones, `[]` clears them.",
    )
    blocks: Optional[str] = Field(
        default=None,
        description="URL-encoded JSON array of layout blocks; replaces existing ones, `[]` clears them.",
    )
    link_names: Optional[str] = Field(default=None, description="Set to 'true' to link channel/user names in text.")
    parse: Optional[str] = Field(default=None, description="Parse mode for `text`: 'full' or 'none'.")
    text: Optional[str] = Field(default=None, description="New message text (plain or mrkdwn).")


SLACK_TOOLS = [
    ConnectorTool(
        "slack_fetch_conversation_history",
        "Fetches a chronological list of messages and events from a specified slack conversation, accessible "
        "by the authenticated user/bot, with options for pagination and time range filtering.",
        FetchConversationHistoryParams,
    ),
    ConnectorTool(
        "slack_list_all_slack_team_channels",
        "Retrieves public channels, private channels, multi-person direct messages (mpims), and direct "
        "messages (ims) from a slack workspace, with options to filter by type and exclude archived channels.",
        ListChannelsParams,
        action="SLACK_LIST_ALL_SLACK_TEAM_CHANNELS_WITH_VARIOUS_FILTERS",
    ),
    ConnectorTool(
        "slack_search_for_messages_with_query",
        "Searches messages in a slack workspace using a query with optional modifiers (e.g., `in:`, `from:`, "
        "`has:`, `before:`) across accessible channels, dms, and private groups.",
        SearchMessagesParams,
    ),
    ConnectorTool(
        "slack_sends_a_message_to_a_slack_channel",
        "Posts a message to a slack channel, direct message, or private group; requires content via `text`, "
        "`blocks`, or `attachments`.",
        SendMessageParams,
    ),
    ConnectorTool(
        "slack_updates_a_slack_message",
        "Updates a slack message, identified by `channel` id and `ts` timestamp, by modifying its `text`, "
        "`attachments`, or `blocks`; provide at least one content field, noting `attachments`/`blocks` are "
        "replaced if included (`[]` clears them).",
        UpdateMessageParams,
    ),
]


def descriptors(ctx: "ToolContext") -> List[ToolDescriptor]:
    return connector_descriptors(ctx, "Slack", ToolGroup.SLACK, SLACK_TOOLS)
