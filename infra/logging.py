"""
Bolide Centralized Logging
--------------------------
Structured logging with call_id propagation for per-call traceability.

Design:
- Every tool invocation gets a unique call_id
- call_id propagates through: Dispatcher -> Handler -> HTTP / subprocess
- Console output goes to stderr through Rich; stdout carries the protocol
- File output is JSON lines with size-based rotation
- Severity discipline: INFO=state, WARNING=recoverable, ERROR=call failed

Usage:
    from infra.logging import get_logger, CallContext, log_call_end

    logger = get_logger("tools.research")

    with CallContext() as call_id:
        logger.info("Searching")
        log_call_end(call_id, "use_perplexity", success=True)
"""

import contextvars
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "bolide"
DEFAULT_LOG_DIR = Path.home() / ".bolide-ai-mcp" / "logs"
LOG_FILE_NAME = "bolide-mcp.log"

# Context variable for call_id - thread-safe and async-safe
_call_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "call_id", default=None
)


def generate_call_id() -> str:
    """Generate a unique call ID."""
    return f"call_{uuid.uuid4().hex[:12]}"


def get_call_id() -> Optional[str]:
    """Get the current call ID from context."""
    return _call_id_var.get()


def set_call_id(call_id: str) -> contextvars.Token:
    """Set the current call ID in context."""
    return _call_id_var.set(call_id)


def reset_call_id(token: contextvars.Token) -> None:
    """Reset the call ID to its previous value."""
    _call_id_var.reset(token)


class CallContext:
    """
    Context manager for call scoping.

    Usage:
        with CallContext() as call_id:
            # All logs within this block carry call_id
            logger.info("Processing...")
    """

    def __init__(self, call_id: Optional[str] = None):
        self._call_id = call_id or generate_call_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_call_id(self._call_id)
        return self._call_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            reset_call_id(self._token)


class CallIdFilter(logging.Filter):
    """Logging filter that adds call_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "call_id") or record.call_id is None:
            record.call_id = get_call_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    EXTRA_FIELDS = ("tool_name", "execution_time_ms", "success", "status_code", "error")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "call_id": getattr(record, "call_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class CallIdFormatter(logging.Formatter):
    """Console format: [call_id] logger: message."""

    def format(self, record: logging.LogRecord) -> str:
        call_id = getattr(record, "call_id", "-")
        prefix = f"[{call_id}] " if call_id != "-" else ""
        return f"{prefix}{record.name}: {record.getMessage()}"


class FileRotatingHandler(logging.FileHandler):
    """Simple file handler with size-based rotation."""

    MAX_BYTES = 10 * 1024 * 1024  # 10 MB
    BACKUP_COUNT = 3

    def __init__(self, filename: str, max_bytes: Optional[int] = None, backup_count: Optional[int] = None):
        self._base_path = Path(filename)
        self._max_bytes = max_bytes or self.MAX_BYTES
        self._backup_count = backup_count or self.BACKUP_COUNT

        self._base_path.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(str(self._base_path), mode="a", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if self._base_path.exists() and self._base_path.stat().st_size > self._max_bytes:
                self._rotate()
        except OSError:
            self.handleError(record)

        super().emit(record)

    def _rotate(self) -> None:
        """Rotate log files."""
        self.close()

        # Shift existing backups
        for i in range(self._backup_count - 1, 0, -1):
            src = self._base_path.with_suffix(f".{i}.log")
            dst = self._base_path.with_suffix(f".{i + 1}.log")
            if src.exists():
                if dst.exists():
                    dst.unlink()
                src.rename(dst)

        if self._base_path.exists():
            backup = self._base_path.with_suffix(".1.log")
            if backup.exists():
                backup.unlink()
            self._base_path.rename(backup)

        self.stream = open(str(self._base_path), mode="a", encoding="utf-8")


# Global configuration state
_logging_initialized = False
_log_file_path: Optional[Path] = None


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    console: bool = True,
    file: bool = True,
    force: bool = False,
) -> Optional[Path]:
    """
    Configure the bolide logging tree.

    Args:
        level: Logging level (default INFO)
        log_dir: Directory for log files (default: ~/.bolide-ai-mcp/logs)
        console: Enable Rich console output on stderr
        file: Enable JSON file output
        force: Reconfigure even if already configured

    Returns:
        Path of the log file, if file output is enabled
    """
    global _logging_initialized, _log_file_path

    if _logging_initialized and not force:
        return _log_file_path

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.propagate = False

    call_filter = CallIdFilter()

    if console:
        console_handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
        )
        console_handler.setLevel(level)
        console_handler.setFormatter(CallIdFormatter())
        console_handler.addFilter(call_filter)
        root_logger.addHandler(console_handler)

    _log_file_path = None
    if file:
        log_path = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
        try:
            log_path.mkdir(parents=True, exist_ok=True)
            file_handler = FileRotatingHandler(str(log_path / LOG_FILE_NAME))
        except OSError as e:
            # Console-only; the server must still start
            root_logger.warning(f"File logging disabled, cannot write to {log_path}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)  # File gets everything
            file_handler.setFormatter(JSONFormatter())
            file_handler.addFilter(call_filter)
            root_logger.addHandler(file_handler)
            _log_file_path = log_path / LOG_FILE_NAME

    _logging_initialized = True
    return _log_file_path


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the bolide namespace.

    Args:
        name: Logger name (prefixed with 'bolide.' if not already)
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


def log_call_end(
    call_id: str,
    tool_name: str,
    success: bool,
    execution_time_ms: float = 0.0,
    error: Optional[str] = None,
) -> None:
    """
    Log the end of a tool call with summary information.

    This is the CALL_END boundary event for post-mortems.
    """
    logger = get_logger("tools.call")

    extra = {
        "call_id": call_id,
        "tool_name": tool_name,
        "success": success,
        "execution_time_ms": round(execution_time_ms, 2),
    }

    if success:
        logger.info(
            f"CALL_END: tool={tool_name}, success=True, time_ms={extra['execution_time_ms']}",
            extra=extra,
        )
    else:
        extra["error"] = error or "Unknown error"
        logger.warning(
            f"CALL_END: tool={tool_name}, success=False, error={error or 'Unknown'}",
            extra=extra,
        )
