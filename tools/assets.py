"""
Asset Tools
-----------
Final marketing materials: post and research markdown files.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List
import logging

from pydantic import Field

from core.errors import ValidationError
from core.gate import ToolGroup, tool_flag_name
from infra.workspace import child_path, get_assets_path

from .registry import ToolDescriptor, ToolParams

if TYPE_CHECKING:
    from .catalog import ToolContext

logger = logging.getLogger("bolide.tools.assets")

BUNDLE_SWITCH = tool_flag_name("create_post_asset")


class CreatePostAssetParams(ToolParams):
    name: str = Field(description="Name of the post asset file to create")
    content: str = Field(
        description="Text content to store in the post asset. IMPORTANT: Use only post body, do not include title.",
    )


class CreateResearchAssetParams(ToolParams):
    name: str = Field(description="Name of the research asset file to create")
    content: str = Field(description="Research content to store in the research asset.")


def markdown_name(name: str) -> str:
    return name if name.endswith(".md") else f"{name}.md"


def write_asset(directory: Path, name: str, content: str, kind: str) -> Path:
    """Write a new markdown asset; existing files are never overwritten."""
    file_path = child_path(directory, markdown_name(name), "name")
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ValidationError(f"Failed to create {kind} directory: {e}") from e

    if file_path.exists():
        raise ValidationError(f"{kind.capitalize()} asset already exists at {file_path}")

    try:
        file_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ValidationError(f"Failed to create {kind} asset: {e}") from e

    logger.info(f"Successfully created {kind} asset at {file_path}")
    return file_path


def _asset_response(file_path: Path, name: str, content: str, kind: str) -> Dict[str, Any]:
    return {
        "success": True,
        "filePath": str(file_path),
        "message": f"Successfully created {kind} asset at {file_path}",
        "name": name,
        "textLength": len(content),
    }


def create_post_asset(ctx: "ToolContext", params: CreatePostAssetParams) -> Dict[str, Any]:
    directory = get_assets_path(ctx.config) / "posts"
    logger.info(f"Creating post asset {params.name} in {directory}")
    file_path = write_asset(directory, params.name, params.content, "post")
    return _asset_response(file_path, params.name, params.content, "post")


def create_research_asset(ctx: "ToolContext", params: CreateResearchAssetParams) -> Dict[str, Any]:
    directory = get_assets_path(ctx.config) / "research"
    logger.info(f"Creating research asset {params.name} in {directory}")
    file_path = write_asset(directory, params.name, params.content, "research")
    return _asset_response(file_path, params.name, params.content, "research")


def descriptors(ctx: "ToolContext") -> List[ToolDescriptor]:
    groups = frozenset({ToolGroup.ASSET_GENERATORS})
    return [
        ToolDescriptor(
            name="create_post_asset",
            description=(
                "Creates a post asset file in the marketing assets directory. IMPORTANT: You MUST "
                "provide the name and content parameters. Example: "
                'create_post_asset({ name: "FILE_NAME", content: "FILE_CONTENT" })'
            ),
            handler=lambda params: create_post_asset(ctx, params),
            parameter_schema=CreatePostAssetParams,
            groups=groups,
            bundle_flag=BUNDLE_SWITCH,
        ),
        ToolDescriptor(
            name="create_research_asset",
            description=(
                "Creates a research asset file in the marketing assets directory. IMPORTANT: You MUST "
                "provide the name and content parameters. Example: "
                'create_research_asset({ name: "FILE_NAME", content: "RESEARCH_CONTENT" })'
            ),
            handler=lambda params: create_research_asset(ctx, params),
            parameter_schema=CreateResearchAssetParams,
            groups=groups,
            bundle_flag=BUNDLE_SWITCH,
        ),
    ]
