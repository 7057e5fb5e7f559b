"""
Error Handling Module
---------------------
Typed errors with classification.
Every failure reaching the dispatcher is turned into an error envelope;
nothing is retried.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Dict, List, Optional
import logging
import traceback

import httpx


class BolideError(Exception):
    """Base class for errors raised by tool handlers and infrastructure."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(BolideError):
    """A parameter, path or precondition check failed."""

    def __init__(self, message: str, param_name: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details)
        self.param_name = param_name


class APIError(BolideError):
    """The web API answered with an error status or an unusable body."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
    ):
        super().__init__(message, error)
        self.status_code = status_code
        self.error = error


class CommandError(BolideError):
    """An external command exited non-zero or could not be started."""

    def __init__(self, message: str, command: Optional[List[str]] = None, output: str = ""):
        super().__init__(message, output or None)
        self.command = command or []
        self.output = output


class ConfigurationError(BolideError):
    """Server configuration is missing or malformed."""


class DependencyError(CommandError, ConfigurationError):
    """A required binary or application is not installed."""


class DuplicateToolError(BolideError):
    """Two descriptors share the same tool name."""

    def __init__(self, name: str):
        super().__init__(f"Duplicate tool name: {name}")
        self.name = name


class ToolNotFoundError(BolideError):
    """No tool with this name is bound."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ErrorCategory(Enum):
    """Categories of errors for logging decisions."""
    VALIDATION_ERROR = auto()     # Arguments or preconditions
    API_ERROR = auto()            # Web API / connector
    COMMAND_ERROR = auto()        # ffmpeg, pgrep, brew, ...
    CONFIGURATION_ERROR = auto()  # Missing config or dependency
    NETWORK_ERROR = auto()        # Transport level
    TIMEOUT_ERROR = auto()        # Operation timed out
    FILESYSTEM_ERROR = auto()     # OSError from the file system
    HANDLER_FAILURE = auto()      # Anything else raised by a handler


def classify_exception(exception: BaseException) -> ErrorCategory:
    """Map an exception to its category."""
    if isinstance(exception, DependencyError):
        return ErrorCategory.CONFIGURATION_ERROR
    if isinstance(exception, ValidationError):
        return ErrorCategory.VALIDATION_ERROR
    if isinstance(exception, APIError):
        return ErrorCategory.API_ERROR
    if isinstance(exception, CommandError):
        return ErrorCategory.COMMAND_ERROR
    if isinstance(exception, ConfigurationError):
        return ErrorCategory.CONFIGURATION_ERROR
    if isinstance(exception, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT_ERROR
    if isinstance(exception, httpx.TransportError):
        return ErrorCategory.NETWORK_ERROR
    if isinstance(exception, TimeoutError):
        return ErrorCategory.TIMEOUT_ERROR
    if isinstance(exception, OSError):
        return ErrorCategory.FILESYSTEM_ERROR
    return ErrorCategory.HANDLER_FAILURE


def format_error_text(message: str, details: Optional[str] = None) -> str:
    """Standard error envelope text."""
    detail_text = f"\nDetails: {details}" if details else ""
    return f"Error: {message}{detail_text}"


@dataclass
class ToolFailure:
    """
    Structured record of a failed tool call.

    Used for consistent logging and reporting.
    """
    category: ErrorCategory
    message: str
    tool_name: str = ""
    details: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    stack_trace: Optional[str] = None

    @classmethod
    def from_exception(cls, exception: BaseException, tool_name: str = "") -> "ToolFailure":
        """Create a failure record from an exception."""
        return cls(
            category=classify_exception(exception),
            message=str(exception) or exception.__class__.__name__,
            tool_name=tool_name,
            details=getattr(exception, "details", None),
            stack_trace="".join(
                traceback.format_exception(type(exception), exception, exception.__traceback__)
            ),
        )

    def to_text(self) -> str:
        return format_error_text(self.message, self.details)

    def __repr__(self) -> str:
        return f"ToolFailure({self.category.name}: {self.message})"


class ErrorHandler:
    """
    Central error handler with logging and bounded history.
    """

    def __init__(self, max_history: int = 100):
        self._logger = logging.getLogger("bolide.errors")
        self._error_history: List[ToolFailure] = []
        self._max_history = max_history

    def handle(self, failure: ToolFailure) -> str:
        """Log and record a failure, returning the envelope text."""
        self._log_error(failure)

        self._error_history.append(failure)
        if len(self._error_history) > self._max_history:
            self._error_history.pop(0)

        return failure.to_text()

    def handle_exception(self, exception: BaseException, tool_name: str = "") -> str:
        return self.handle(ToolFailure.from_exception(exception, tool_name))

    def _log_error(self, failure: ToolFailure) -> None:
        """Log failure with appropriate level."""
        level_map = {
            ErrorCategory.VALIDATION_ERROR: logging.WARNING,
            ErrorCategory.CONFIGURATION_ERROR: logging.WARNING,
            ErrorCategory.API_ERROR: logging.ERROR,
            ErrorCategory.COMMAND_ERROR: logging.ERROR,
            ErrorCategory.NETWORK_ERROR: logging.ERROR,
            ErrorCategory.TIMEOUT_ERROR: logging.ERROR,
            ErrorCategory.FILESYSTEM_ERROR: logging.ERROR,
            ErrorCategory.HANDLER_FAILURE: logging.ERROR,
        }

        level = level_map.get(failure.category, logging.ERROR)

        self._logger.log(
            level,
            f"{failure.tool_name or '-'} {failure.category.name}: {failure.message}",
            extra={"tool_name": failure.tool_name},
        )

        if failure.stack_trace and failure.category is ErrorCategory.HANDLER_FAILURE:
            self._logger.debug(f"Stack trace:\n{failure.stack_trace}")

    def get_error_stats(self) -> Dict[str, int]:
        """Get error statistics."""
        stats: Dict[str, int] = {}
        for failure in self._error_history:
            key = failure.category.name
            stats[key] = stats.get(key, 0) + 1
        return stats

    @property
    def history(self) -> List[ToolFailure]:
        return list(self._error_history)

    def clear_history(self) -> None:
        """Clear error history."""
        self._error_history.clear()
