"""
Artifact Tools
--------------
Timestamped artifact directories for captured screenshots, videos, GIFs
and posts, and post files inside them.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional
import logging

from pydantic import Field

from core.errors import ValidationError
from core.gate import ToolGroup, tool_flag_name
from infra.workspace import child_path, get_artifacts_path

from .registry import ToolDescriptor, ToolParams

if TYPE_CHECKING:
    from .catalog import ToolContext

logger = logging.getLogger("bolide.tools.artifacts")

ARTIFACT_SUBFOLDERS = ("screenshots", "videos", "posts", "gifs")
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
BUNDLE_SWITCH = tool_flag_name("create_artifact_directory")


class CreateArtifactDirectoryParams(ToolParams):
    artifactName: str = Field(
        description='Name of the artifact directory to create, e.g. "chat", "settings", '
                    '"user profile", etc. IMPORTANT: DO NOT INCLUDE DATETIME',
    )


class CreatePostArtifactParams(ToolParams):
    artifactName: str = Field(description="Name of the artifact directory where the post will be stored")
    fileName: str = Field(description="Name of the post file to create")
    fileContent: str = Field(description="Content of the post file")


def timestamped_name(name: str, now: Optional[datetime] = None) -> str:
    """``<name>-YYYY-MM-DD_HH-MM-SS`` in UTC."""
    now = now or datetime.now(timezone.utc)
    return f"{name}-{now.strftime(TIMESTAMP_FORMAT)}"


def create_artifact_directory(ctx: "ToolContext", params: CreateArtifactDirectoryParams) -> Dict[str, Any]:
    artifacts_directory = get_artifacts_path(ctx.config)
    if not artifacts_directory.exists():
        raise ValidationError(f"Artifacts directory does not exist at {artifacts_directory}")

    name = timestamped_name(params.artifactName)
    artifact_path = child_path(artifacts_directory, name, "artifactName")
    logger.info(f"Creating artifact directory {name} at {artifacts_directory}")

    if artifact_path.exists():
        raise ValidationError(f"Artifact directory already exists at {artifact_path}")

    try:
        for subfolder in ARTIFACT_SUBFOLDERS:
            subfolder_path = artifact_path / subfolder
            subfolder_path.mkdir(parents=True, exist_ok=True)
            (subfolder_path / ".gitkeep").write_text("")
    except OSError as e:
        raise ValidationError(f"Failed to create artifact directory: {e}") from e

    return {
        "success": True,
        "artifactPath": str(artifact_path),
        "message": f"Successfully created artifact directory at {artifact_path}",
        "artifactName": params.artifactName,
        "structure": {
            str(artifact_path): {
                "screenshots": "Directory for screenshot artifacts",
                "videos": "Directory for video artifacts",
                "posts": "Directory for post artifacts",
                "gifs": "Directory for GIF artifacts",
            },
        },
        "nextSteps": [
            f"Navigate to {artifact_path} to start organizing your artifacts",
            "Launch the companion app to start capturing screenshots and videos",
        ],
    }


def create_post_artifact(ctx: "ToolContext", params: CreatePostArtifactParams) -> Dict[str, Any]:
    artifacts_directory = get_artifacts_path(ctx.config)
    if not artifacts_directory.exists():
        raise ValidationError(f"Artifacts directory does not exist at {artifacts_directory}")

    artifact_path = child_path(artifacts_directory, params.artifactName, "artifactName")
    if not artifact_path.exists():
        raise ValidationError(f"Artifact directory does not exist at {artifact_path}")

    posts_path = artifact_path / "posts"
    if not posts_path.exists():
        try:
            posts_path.mkdir(parents=True)
        except OSError as e:
            raise ValidationError(f"Failed to create posts directory: {e}") from e
        logger.info(f"Created posts directory at {posts_path}")

    file_path = child_path(posts_path, params.fileName, "fileName")
    if file_path.exists():
        raise ValidationError(f"Post file already exists at {file_path}")

    try:
        file_path.write_text(params.fileContent, encoding="utf-8")
    except OSError as e:
        raise ValidationError(f"Failed to create post artifact: {e}") from e
    logger.info(f"Successfully created post artifact at {file_path}")

    return {
        "success": True,
        "filePath": str(file_path),
        "message": f"Successfully created post artifact at {file_path}",
        "artifactName": params.artifactName,
        "fileName": params.fileName,
    }


def descriptors(ctx: "ToolContext") -> List[ToolDescriptor]:
    groups = frozenset({ToolGroup.ARTIFACTS})
    return [
        ToolDescriptor(
            name="create_artifact_directory",
            description=(
                "Creates a new artifact directory with screenshots, videos, and posts subfolders. "
                "IMPORTANT: You MUST provide the artifactName parameter. Example: "
                'create_artifact_directory({ artifactName: "ARTIFACT_NAME_WITHOUT_DATETIME" })'
            ),
            handler=lambda params: create_artifact_directory(ctx, params),
            parameter_schema=CreateArtifactDirectoryParams,
            groups=groups,
            bundle_flag=BUNDLE_SWITCH,
        ),
        ToolDescriptor(
            name="create_post_artifact",
            description=(
                "Stores a post artifact in the given artifact directory. IMPORTANT: You MUST provide "
                "the artifactName, fileName, and fileContent parameters. Example: create_post_artifact("
                '{ artifactName: "ARTIFACT_NAME", fileName: "FILE_NAME", fileContent: "FILE_CONTENT" })'
            ),
            handler=lambda params: create_post_artifact(ctx, params),
            parameter_schema=CreatePostArtifactParams,
            groups=groups,
            bundle_flag=BUNDLE_SWITCH,
        ),
    ]
