"""
Scaffold Tools
--------------
Creates the marketing project skeleton inside the workspace.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List
import json
import logging
import shutil

from core.errors import ValidationError
from core.gate import ToolGroup, tool_flag_name
from infra.workspace import get_workspace_path

from .registry import NoParams, ToolDescriptor

if TYPE_CHECKING:
    from .catalog import ToolContext

logger = logging.getLogger("bolide.tools.scaffold")

BUNDLE_SWITCH = tool_flag_name("scaffold_project")


def update_workspace_file(workspace_path: Path, folder_name: str) -> None:
    """Add the project folder to the first *.code-workspace file, if needed."""
    workspace_files = sorted(workspace_path.glob("*.code-workspace"))
    if not workspace_files:
        logger.info("No .code-workspace file found, skipping workspace update")
        return

    workspace_file = workspace_files[0]
    logger.info(f"Found workspace file: {workspace_file.name}")

    try:
        workspace = json.loads(workspace_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to update workspace file: {e}")
        return

    if not isinstance(workspace, dict):
        logger.error(f"Failed to update workspace file: {workspace_file.name} is not a JSON object")
        return

    folders = workspace.setdefault("folders", [])
    paths = {folder.get("path") for folder in folders if isinstance(folder, dict)}

    if "." in paths:
        logger.info("Workspace was initialized with a root folder, skipping workspace update")
        return

    if folder_name in paths or f"./{folder_name}" in paths:
        logger.info(f"{folder_name} folder already exists in workspace file")
        return

    folders.append({"path": folder_name})
    try:
        workspace_file.write_text(json.dumps(workspace, indent=2), encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to update workspace file: {e}")
        return
    logger.info(f"Added {folder_name} folder to workspace file: {workspace_file.name}")


def copy_template_contents(template_path: Path, target_path: Path) -> None:
    if not template_path.is_dir():
        logger.info(f"Template directory not found at {template_path}, skipping template copy")
        return

    shutil.copytree(template_path, target_path, dirs_exist_ok=True)
    logger.info(f"Copied template contents from {template_path}")


def scaffold_marketing_project(ctx: "ToolContext", params: NoParams) -> Dict[str, Any]:
    workspace_path = get_workspace_path(ctx.config)
    project_path = workspace_path / ctx.config.project_dir_name
    logger.info(f"Scaffolding marketing project at {workspace_path}")

    if project_path.exists():
        raise ValidationError(f"Marketing directory already exists at {project_path}")

    assets_path = project_path / "assets"
    artifacts_path = project_path / "artifacts"
    posts_path = assets_path / "posts"
    research_path = assets_path / "research"

    try:
        for directory in (posts_path, research_path, artifacts_path):
            directory.mkdir(parents=True, exist_ok=True)
        for directory in (assets_path, artifacts_path, posts_path, research_path):
            (directory / ".gitkeep").write_text("")

        if ctx.config.template_dir:
            copy_template_contents(Path(ctx.config.template_dir), project_path)
    except OSError as e:
        raise ValidationError(f"Failed to create marketing project: {e}") from e

    update_workspace_file(workspace_path, ctx.config.project_dir_name)

    return {
        "success": True,
        "projectPath": str(project_path),
        "message": f"Successfully created marketing project at {project_path}",
        "structure": {
            ctx.config.project_dir_name: {
                "artifacts": {
                    "description": "Directory for intermediate materials "
                                   "(screenshots and video recordings of app functionality)",
                },
                "assets": {
                    "description": "Directory for final materials "
                                   "(documentation, social media posts, help desk materials, etc.)",
                    "subdirectories": {
                        "posts": {"description": "Directory for social media posts and content"},
                        "research": {"description": "Directory for research results"},
                    },
                },
            },
        },
        "nextSteps": [
            f"Navigate to {project_path} to start organizing your marketing materials",
            'Create an artifact directory using the create_artifact_directory({ artifactName: "ARTIFACT_NAME" }) '
            "to start capturing screenshots, videos, and generating posts",
        ],
    }


def descriptors(ctx: "ToolContext") -> List[ToolDescriptor]:
    return [
        ToolDescriptor(
            name="scaffold_marketing_project",
            description=(
                "Create a marketing project directory with assets and artifacts subdirectories. "
                "Example: scaffold_marketing_project()"
            ),
            handler=lambda params: scaffold_marketing_project(ctx, params),
            groups=frozenset({ToolGroup.SCAFFOLDING}),
            bundle_flag=BUNDLE_SWITCH,
        ),
    ]
