# Infrastructure module - Config, logging, workspace paths and subprocesses
# The MCP server lives in infra.server and is imported directly

from .config import ServerConfig, SERVER_NAME, SERVER_VERSION
from .logging import (
    get_logger, configure_logging, CallContext,
    log_call_end, get_call_id, generate_call_id
)
from .workspace import (
    get_workspace_path, get_project_path, get_screencasts_path,
    get_gifs_path, get_artifacts_path, get_assets_path
)
from .command import CommandRunner, CommandResult, run_command

__all__ = [
    # Config
    "ServerConfig",
    "SERVER_NAME",
    "SERVER_VERSION",
    # Logging
    "get_logger",
    "configure_logging",
    "CallContext",
    "log_call_end",
    "get_call_id",
    "generate_call_id",
    # Workspace
    "get_workspace_path",
    "get_project_path",
    "get_screencasts_path",
    "get_gifs_path",
    "get_artifacts_path",
    "get_assets_path",
    # Commands
    "CommandRunner",
    "CommandResult",
    "run_command",
]
