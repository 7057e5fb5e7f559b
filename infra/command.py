"""
Command Execution
-----------------
Runs external programs (ffmpeg, ffprobe, pgrep, osascript, brew).

Rules:
- No shell=True; arguments are always passed as a list
- Output is always captured
- Every blocking call has a timeout
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
import json
import logging
import os
import subprocess

from core.errors import CommandError, DependencyError

DEFAULT_TIMEOUT = 600.0

logger = logging.getLogger("bolide.infra.command")


@dataclass
class CommandResult:
    """Result of running a command."""
    command: List[str]
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    pid: Optional[int] = None
    detached: bool = False

    @property
    def success(self) -> bool:
        return self.detached or self.returncode == 0

    @property
    def error(self) -> Optional[str]:
        if self.success:
            return None
        return self.stderr.strip() or f"exit code {self.returncode}"


def run_command(
    args: List[str],
    log_prefix: str = "",
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    detached: bool = False,
) -> CommandResult:
    """
    Run a command and capture its output.

    A non-zero exit is reported in the result, not raised. A missing
    executable or a timeout raises CommandError.
    """
    args = [str(a) for a in args]
    logger.info(f"Executing {log_prefix + ' ' if log_prefix else ''}command: {' '.join(args)}")

    full_env: Optional[Dict[str, str]] = None
    if env:
        full_env = {**os.environ, **env}

    try:
        if detached:
            process = subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=full_env,
                start_new_session=True,
            )
            return CommandResult(command=args, returncode=None, pid=process.pid, detached=True)

        completed = subprocess.run(
            args,
            capture_output=True,
            text=True,
            env=full_env,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise DependencyError(f"Command not found: {args[0]}", command=args) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"Command timed out after {timeout}s: {args[0]}", command=args) from e

    result = CommandResult(
        command=args,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    if not result.success:
        logger.debug(f"{args[0]} exited with {completed.returncode}: {result.error}")
    return result


@dataclass
class CommandRunner:
    """Runs commands on behalf of handlers and records what was run."""
    timeout: Optional[float] = DEFAULT_TIMEOUT
    history: List[List[str]] = field(default_factory=list)

    def run(self, args: List[str], log_prefix: str = "", **kwargs: Any) -> CommandResult:
        self.history.append([str(a) for a in args])
        kwargs.setdefault("timeout", self.timeout)
        return run_command(args, log_prefix=log_prefix, **kwargs)

    def check(self, args: List[str], log_prefix: str = "", **kwargs: Any) -> CommandResult:
        result = self.run(args, log_prefix=log_prefix, **kwargs)
        if not result.success:
            raise CommandError(
                f"{log_prefix or args[0]} failed: {result.error}",
                command=result.command,
                output=result.stderr,
            )
        return result

    def probe_streams(self, path: str) -> List[Dict[str, Any]]:
        """Stream descriptions of a media file, from ffprobe's JSON output."""
        result = self.check(
            ["ffprobe", "-v", "quiet", "-print_format", "json", "-show_streams", str(path)],
            log_prefix="Probe streams",
        )
        try:
            data = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise CommandError(f"Unreadable ffprobe output for {path}", output=result.stdout) from e
        return list(data.get("streams", []))

    def probe_duration(self, path: str) -> float:
        """Container duration in seconds."""
        result = self.check(
            ["ffprobe", "-v", "quiet", "-show_entries", "format=duration", "-of", "csv=p=0", str(path)],
            log_prefix="Probe duration",
        )
        try:
            return float(result.stdout.strip())
        except ValueError as e:
            raise CommandError(f"Unreadable duration for {path}: {result.stdout.strip()!r}") from e
