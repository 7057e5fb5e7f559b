"""
Workspace Paths
---------------
Resolves the editor workspace and the project directory inside it.

WORKSPACE_FOLDER_PATHS may hold a single path or a comma-separated list;
for a list the workspace is the parent of the first entry.
"""

from pathlib import Path
import logging

from core.errors import ValidationError

from .config import ServerConfig

logger = logging.getLogger("bolide.infra.workspace")


def get_workspace_path(config: ServerConfig) -> Path:
    workspace_paths = (config.workspace_paths or "").strip()

    if not workspace_paths:
        raise ValidationError("WORKSPACE_FOLDER_PATHS is not set", param_name="WORKSPACE_FOLDER_PATHS")

    if "," in workspace_paths:
        logger.info("Workspace path contains multiple paths, resolving from the first path")
        return Path(workspace_paths.split(",")[0].strip()).parent

    return Path(workspace_paths)


def get_project_path(config: ServerConfig) -> Path:
    """Project directory: <workspace>/<project_dir_name>."""
    return get_workspace_path(config) / config.project_dir_name


def get_screencasts_path(config: ServerConfig) -> Path:
    return get_project_path(config) / "screencasts"


def get_gifs_path(config: ServerConfig) -> Path:
    return get_project_path(config) / "gifs"


def get_artifacts_path(config: ServerConfig) -> Path:
    return get_project_path(config) / "artifacts"


def get_assets_path(config: ServerConfig) -> Path:
    return get_project_path(config) / "assets"


def child_path(parent: Path, name: str, param_name: str) -> Path:
    """parent / name, rejecting names that resolve outside parent."""
    path = parent / name
    root = parent.resolve()
    if root not in path.resolve().parents:
        raise ValidationError(
            f"Invalid {param_name}: {name!r} must stay inside {parent}",
            param_name=param_name,
        )
    return path
