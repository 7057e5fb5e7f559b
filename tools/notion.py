"""
Notion Tools
------------
Notion actions through Composio.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.gate import ToolGroup

from .connectors import ConnectorTool, connector_descriptors
from .registry import ToolDescriptor, ToolParams

if TYPE_CHECKING:
    from .catalog import ToolContext


PropertyType = Literal[
    "title", "rich_text", "number", "select", "multi_select", "date", "people", "files",
    "checkbox", "url", "email", "phone_number", "formula", "relation", "rollup", "status",
    "created_time", "created_by", "last_edited_time", "last_edited_by",
]

BlockType = Literal[
    "paragraph", "heading_1", "heading_2", "heading_3", "bulleted_list_item",
    "numbered_list_item", "to_do", "toggle", "code", "quote", "callout", "divider",
    "image", "video", "file", "bookmark", "embed", "equation", "table_of_contents",
    "breadcrumb", "column_list", "column", "link_to_page", "synced_block", "template",
    "child_page", "child_database",
]


# -----------------------------------------------------------------------------
# Shared shapes
# -----------------------------------------------------------------------------

class RichTextInput(BaseModel):
    """Simplified rich text accepted by Composio."""
    block_property: str = Field(
        default="paragraph",
        description="The block property of the block to be added. Possible properties are `paragraph`, "
                    "`heading_1`, `heading_2`, `heading_3`, `callout`, `to_do`, `toggle`, `quote`, "
                    "`bulleted_list_item`, `numbered_list_item`. Other properties possible are `file`, "
                    "`image`, `video` (link required).",
    )
    content: str = Field(
        description="The textual content of the rich text object. Required for paragraph, heading_1, "
                    "heading_2, heading_3, callout, to_do, toggle, quote.",
    )
    link: Optional[str] = Field(
        default=None,
        description="The URL of the rich text object or the file to be uploaded or image/video link",
    )
    bold: bool = Field(default=False, description="Indicates if the text is bold.")
    italic: bool = Field(default=False, description="Indicates if the text is italic.")
    underline: bool = Field(default=False, description="Indicates if the text is underlined.")
    strikethrough: bool = Field(default=False, description="Indicates if the text has strikethrough.")
    code: bool = Field(default=False, description="Indicates if the text is formatted as code.")
    color: str = Field(default="default", description="The color of the text background or text itself.")


class TextLink(BaseModel):
    url: str = Field(description="The URL for the link")


class TextBody(BaseModel):
    content: str = Field(description="The textual content of the rich text object")
    link: Optional[TextLink] = Field(default=None, description="Link object if this text should be a hyperlink")


class Annotations(BaseModel):
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False
    color: str = "default"


class RichText(BaseModel):
    """Notion API rich text object."""
    type: Literal["text"] = Field(default="text", description='The type of rich text object, always "text"')
    text: TextBody = Field(description="The text content and optional link")
    annotations: Optional[Annotations] = Field(default=None, description="Text formatting annotations")
    plain_text: Optional[str] = None
    href: Optional[str] = None


class PropertySchema(BaseModel):
    name: str = Field(description="Name of the property")
    type: PropertyType = Field(description="The type of the property, which determines the kind of data it will store.")


class PropertyValue(BaseModel):
    name: str = Field(description="Name of the property")
    type: PropertyType = Field(description="Type of the property")
    value: str = Field(
        description="Value of the property, formatted by type: title/rich_text plain text (max 2000 "
                    'characters); number e.g. "23.4"; select option name; multi_select comma separated '
                    'names; date ISO 8601; people/relation comma separated ids; files comma separated '
                    'urls; checkbox "True" or "False".',
    )


class Sort(BaseModel):
    property_name: str = Field(description="Database column to sort by.")
    ascending: bool = Field(description="True = ASC, False = DESC.")


class PropertySchemaUpdate(BaseModel):
    name: str = Field(description="Name of the property")
    new_type: Optional[str] = Field(default=None, description="New type of the property; unchanged if omitted.")
    remove: bool = Field(default=False, description="Remove the property")
    rename: Optional[str] = Field(default=None, description="New name of the property; unchanged if omitted.")


class ExternalFile(BaseModel):
    url: str


class PageCover(BaseModel):
    type: Optional[Literal["external"]] = None
    external: Optional[ExternalFile] = None


class HostedFile(BaseModel):
    url: str
    expiry_time: Optional[str] = None


class PageIcon(BaseModel):
    type: Optional[Literal["emoji", "external", "file"]] = None
    emoji: Optional[str] = None
    external: Optional[ExternalFile] = None
    file: Optional[HostedFile] = None


class NotionBlock(BaseModel):
    """
    A Notion API block. The type-specific body sits under the key named
    by ``type`` (e.g. ``{"type": "paragraph", "paragraph": {...}}``).
    """
    model_config = ConfigDict(extra="allow")

    object: Literal["block"] = Field(default="block", description='The object type, always "block"')
    type: BlockType = Field(description="The type of block being created")


class BlockAdditionalProperties(BaseModel):
    color: Optional[str] = Field(default=None, description="Text or background color (e.g., 'blue', 'red_background')")
    is_toggleable: Optional[bool] = Field(default=None, description="Whether heading blocks are toggleable")
    checked: Optional[bool] = Field(default=None, description="Whether to-do items are checked")
    language: Optional[str] = Field(default=None, description="Programming language for code blocks")
    icon: Optional[PageIcon] = Field(default=None, description="Icon for callout blocks")
    caption: Optional[List[RichText]] = Field(default=None, description="Caption for media blocks")
    url: Optional[str] = Field(default=None, description="URL for bookmark or embed blocks")
    expression: Optional[str] = Field(default=None, description="LaTeX expression for equation blocks")
    page_id: Optional[str] = Field(default=None, description="Page ID for link_to_page blocks")
    database_id: Optional[str] = Field(default=None, description="Database ID for link_to_page blocks")


# -----------------------------------------------------------------------------
# Parameters
# -----------------------------------------------------------------------------

class AddPageContentParams(ToolParams):
    parent_block_id: str = Field(
        description="Identifier of the parent page or block to which the new content block will be added.",
    )
    content_block: RichTextInput = Field(
        description="Include these fields in the json: {'content': 'Some words', 'link': 'https://random-link.com'}. "
                    "For content styling, refer to https://developers.notion.com/reference/rich-text.",
    )
    after: Optional[str] = Field(
        default=None,
        description="Identifier of an existing block. The new content block will be appended immediately after it.",
    )


class FetchDataParams(ToolParams):
    get_all: bool = Field(default=False, description="If true, fetches both pages and databases.")
    get_databases: bool = Field(default=False, description="If true, fetches all databases.")
    get_pages: bool = Field(default=False, description="If true, fetches all pages.")
    page_size: int = Field(default=100, ge=1, le=100, description="The maximum number of items to retrieve (1-100).")
    query: Optional[str] = Field(default=None, description="Optional search query to filter by title or content.")


class CreateCommentParams(ToolParams):
    comment: RichTextInput = Field(
        description="Content of the comment. Simplest form: {'content': 'Looks good!'}. "
                    "Do NOT wrap this in a list or use Notion API block JSON.",
    )
    discussion_id: Optional[str] = Field(
        default=None,
        description="ID of an existing discussion thread. Required if `parent_page_id` is not provided.",
    )
    parent_page_id: Optional[str] = Field(
        default=None,
        description="ID of the page where the comment will be added. Required if `discussion_id` is not provided.",
    )


class CreateDatabaseParams(ToolParams):
    parent_id: str = Field(description="Identifier of the existing Notion page that will contain the new database.")
    title: str = Field(description="The desired title for the new database.")
    properties: List[PropertySchema] = Field(
        description="The schema (columns) for the new database; at least one 'title' property is generally required.",
    )


class CreateNotionPageParams(ToolParams):
    parent_id: str = Field(description="The UUID of the parent page or database under which the page is created.")
    title: str = Field(description="The title of the new page to be created.")
    cover: Optional[str] = Field(default=None, description="Publicly accessible image URL for the page cover.")
    icon: Optional[str] = Field(default=None, description="A single emoji used as the page icon.")


class FetchDatabaseParams(ToolParams):
    database_id: str = Field(description="The Notion database whose metadata (structure, properties) is retrieved.")


class FetchRowParams(ToolParams):
    page_id: str = Field(description="The UUID of the Notion page (a database row) to retrieve.")


class InsertRowDatabaseParams(ToolParams):
    database_id: str = Field(description="Identifier of the Notion database where the new row is inserted.")
    properties: List[PropertyValue] = Field(
        default_factory=list,
        description="Property values for the new page as a LIST of {name, type, value} objects, not a dictionary.",
    )
    child_blocks: List[RichText] = Field(
        default_factory=list,
        description="Rich text content blocks to append to the new page's body.",
    )
    cover: Optional[str] = Field(default=None, description="URL of an external image to set as the page cover.")
    icon: Optional[str] = Field(default=None, description="A single emoji used as the page icon.")


class QueryDatabaseParams(ToolParams):
    database_id: str = Field(description="Identifier of the Notion database to query.")
    page_size: int = Field(default=2, description="The maximum number of rows to return. Defaults to 2.")
    sorts: Optional[List[Sort]] = Field(
        default=None,
        description="List of sort rules, e.g. [{'property_name': 'Due', 'ascending': False}]",
    )
    start_cursor: Optional[str] = Field(default=None, description="Pagination cursor from a previous `next_cursor`.")


class RetrieveDatabasePropertyParams(ToolParams):
    database_id: str = Field(description="Identifier for the database.")
    property_id: str = Field(description="Identifier for the property. This can be the property ID or name.")


class UpdatePageParams(ToolParams):
    page_id: str = Field(description="Identifier for the Notion page to be updated.")
    archived: Optional[bool] = Field(default=None, description="True archives the page, false restores it.")
    cover: Optional[PageCover] = Field(default=None, description="An external file object for the page cover.")
    icon: Optional[PageIcon] = Field(default=None, description="A page icon object (emoji, external or file).")
    properties: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Property values to update, keyed by property name or ID.",
    )


class UpdateRowDatabaseParams(ToolParams):
    row_id: str = Field(description="Identifier (UUID) of the database row (page) to be updated.")
    properties: List[PropertyValue] = Field(default_factory=list, description="Property values to update.")
    cover: Optional[str] = Field(default=None, description="URL of an external image used as the page cover.")
    icon: Optional[str] = Field(default=None, description="A single emoji used as the page icon.")
    delete_row: bool = Field(default=False, description="If true, the row (page) is archived.")


class UpdateSchemaDatabaseParams(ToolParams):
    database_id: str = Field(description="Identifier of the Notion database to update.")
    title: Optional[str] = Field(default=None, description="New title for the database; unchanged if omitted.")
    description: Optional[str] = Field(default=None, description="New description; unchanged if omitted.")
    properties: List[PropertySchemaUpdate] = Field(
        default_factory=list,
        description="Property updates; each names a column plus one of 'new_type', 'rename' or 'remove'.",
    )


class AppendBlockChildrenParams(ToolParams):
    block_id: str = Field(description="Identifier of the parent block or page to which child blocks are appended.")
    children: List[NotionBlock] = Field(
        description="Block objects to add as children. At most 100 blocks per request; up to two levels of nesting.",
    )
    after: Optional[str] = Field(default=None, description="ID of an existing child block to insert after.")


class FetchNotionBlockParams(ToolParams):
    block_id: str = Field(description="The UUID of the Notion block (or page) to retrieve.")


class FetchNotionChildBlockParams(ToolParams):
    block_id: str = Field(description="Identifier of the parent Notion block or page whose children are fetched.")
    page_size: Optional[int] = Field(default=None, description="Maximum number of child blocks to return (max 100).")
    start_cursor: Optional[str] = Field(default=None, description="Pagination cursor from a previous response.")


class UpdateBlockParams(ToolParams):
    block_id: str = Field(description="Identifier of the Notion block to be updated.")
    block_type: str = Field(
        description="The type of the block to update: 'paragraph', 'heading_1', 'heading_2', 'heading_3', "
                    "'bulleted_list_item', 'numbered_list_item', 'to_do', 'toggle'.",
    )
    content: str = Field(description="The new text content for the block.")
    additional_properties: Optional[BlockAdditionalProperties] = Field(
        default=None,
        description="Type-specific properties merged into the block's data object (e.g. `checked`, `color`).",
    )


class SearchNotionPageParams(ToolParams):
    query: str = Field(default="", description="Text to search for in page and database titles; empty lists all.")
    filter_property: str = Field(default="object", description="The property to filter by. Only `object` is supported.")
    filter_value: Optional[str] = Field(default="page", description="`page` or `database`. Defaults to `page`.")
    page_size: Optional[int] = Field(default=2, ge=1, le=100, description="Number of items to return (1-100).")
    start_cursor: Optional[str] = Field(default=None, description="Pagination cursor from a previous response.")
    timestamp: Optional[str] = Field(default=None, description="Sort timestamp; only `last_edited_time` is supported.")
    direction: Optional[str] = Field(default=None, description="`ascending` or `descending`; required with timestamp.")


NOTION_TOOLS = [
    ConnectorTool(
        "notion_add_page_content",
        "Appends a single content block to a notion page or a parent block (must be page, toggle, to-do, "
        "bulleted/numbered list, callout, or quote); invoke repeatedly to add multiple blocks.",
        AddPageContentParams,
    ),
    ConnectorTool(
        "notion_fetch_data",
        "Fetches notion items (pages and/or databases) from the notion workspace, always call this action "
        "to get page id or database id in the simplest way",
        FetchDataParams,
    ),
    ConnectorTool(
        "notion_create_comment",
        "Adds a comment to a notion page (via `parent page id`) or to an existing discussion thread (via "
        "`discussion id`); cannot create new discussion threads on specific blocks (inline comments).",
        CreateCommentParams,
    ),
    ConnectorTool(
        "notion_create_database",
        "Creates a new notion database as a subpage under a specified parent page with a defined properties "
        "schema; use this action exclusively for creating new databases.",
        CreateDatabaseParams,
    ),
    ConnectorTool(
        "notion_create_notion_page",
        "Creates a new empty page in a notion workspace.",
        CreateNotionPageParams,
    ),
    ConnectorTool(
        "notion_fetch_database",
        "Fetches a notion database's structural metadata (properties, title, etc.) via its `database id`, "
        "not the data entries; `database id` must reference an existing database.",
        FetchDatabaseParams,
    ),
    ConnectorTool(
        "notion_fetch_row",
        "Retrieves a notion database row's properties and metadata; use a different action for page content blocks.",
        FetchRowParams,
    ),
    ConnectorTool(
        "notion_insert_row_database",
        "Creates a new page (row) in a specified notion database.",
        InsertRowDatabaseParams,
    ),
    ConnectorTool(
        "notion_query_database",
        "Queries a notion database for pages (rows), where rows are pages and columns are properties; ensure "
        "sort property names correspond to existing database properties.",
        QueryDatabaseParams,
    ),
    ConnectorTool(
        "notion_retrieve_database_property",
        "Tool to retrieve a specific property object of a notion database. use when you need to get details "
        "about a single database column/property.",
        RetrieveDatabasePropertyParams,
    ),
    ConnectorTool(
        "notion_update_page",
        "Tool to update the properties, icon, cover, or archive status of a page. use when you need to modify "
        "existing page attributes.",
        UpdatePageParams,
    ),
    ConnectorTool(
        "notion_update_row_database",
        "Updates or archives an existing notion database row (page) using its `row id`, allowing modification "
        "of its icon, cover, and/or properties.",
        UpdateRowDatabaseParams,
    ),
    ConnectorTool(
        "notion_update_schema_database",
        "Updates an existing notion database's title, description, and/or properties; at least one of these "
        "attributes must be provided to effect a change.",
        UpdateSchemaDatabaseParams,
    ),
    ConnectorTool(
        "notion_append_block_children",
        "Appends new child blocks to a specified parent block or page in Notion, ideal for adding content "
        "within an existing structure (e.g., list items, toggle content) rather than creating new pages; the "
        "parent must be able to accept children. Up to 100 block children can be appended per request.",
        AppendBlockChildrenParams,
    ),
    ConnectorTool(
        "notion_fetch_notion_block",
        "Retrieves a notion block (or page, as pages are blocks) using its valid uuid; if the block has "
        "children, use a separate action to fetch them.",
        FetchNotionBlockParams,
    ),
    ConnectorTool(
        "notion_fetch_notion_child_block",
        "Retrieves a paginated list of direct, first-level child block objects for a given parent notion "
        "block or page id; use block ids from the response for subsequent calls to access deeply nested content.",
        FetchNotionChildBlockParams,
    ),
    ConnectorTool(
        "notion_notion_update_block",
        "Updates an existing notion block's textual content or type-specific properties (e.g., 'checked' "
        "status, 'color'), using its `block id` and the specified `block type`.",
        UpdateBlockParams,
    ),
    ConnectorTool(
        "notion_search_notion_page",
        "Searches notion pages and databases by title; an empty query lists all accessible items, useful for "
        "discovering ids or as a fallback when a specific query yields no results.",
        SearchNotionPageParams,
    ),
]


def descriptors(ctx: "ToolContext") -> List[ToolDescriptor]:
    return connector_descriptors(ctx, "Notion", ToolGroup.NOTION, NOTION_TOOLS)
