# Core module - Errors and tool enablement
# The gate is pure decision logic; it never touches the registry

from .errors import (
    ErrorHandler, BolideError, ErrorCategory, ToolFailure,
    ValidationError, APIError, CommandError, ConfigurationError,
    DependencyError, DuplicateToolError, ToolNotFoundError,
)
from .gate import EnablementGate, ToolGroup, tool_flag_name

__all__ = [
    "ErrorHandler", "BolideError", "ErrorCategory", "ToolFailure",
    "ValidationError", "APIError", "CommandError", "ConfigurationError",
    "DependencyError", "DuplicateToolError", "ToolNotFoundError",
    "EnablementGate", "ToolGroup", "tool_flag_name",
]
