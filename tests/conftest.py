"""
Bolide Test Configuration
-------------------------
Shared fixtures and configuration for all tests.

External programs and the network are never reached: subprocesses are
blocked and HTTP goes through httpx.MockTransport.
"""

import json
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.gate import EnablementGate
from infra.command import CommandResult, CommandRunner
from infra.config import ServerConfig
import infra.server  # noqa: F401  (mcp must import before subprocess is patched)
from tools.catalog import ToolContext


# =============================================================================
# Test Isolation: Block Side Effects
# =============================================================================

@pytest.fixture(autouse=True)
def block_subprocess(monkeypatch):
    """
    Block subprocess.run() and Popen() during tests.

    Handlers must go through an injected CommandRunner; anything that
    reaches a real process raises RuntimeError.
    """
    def _blocked(*args, **kwargs):
        raise RuntimeError(
            "subprocess is forbidden during tests. "
            "Inject a FakeRunner or monkeypatch subprocess explicitly."
        )

    monkeypatch.setattr(subprocess, "run", _blocked)
    monkeypatch.setattr(subprocess, "Popen", _blocked)


# =============================================================================
# Fakes
# =============================================================================

def command_result(stdout: str = "", returncode: int = 0, stderr: str = "") -> CommandResult:
    return CommandResult(command=[], returncode=returncode, stdout=stdout, stderr=stderr)


class FakeRunner(CommandRunner):
    """
    CommandRunner that records commands instead of running them.

    Scripted results are queued per program name; the last queued result
    repeats. ffmpeg calls create their output file (the last argument).
    """

    def __init__(self):
        super().__init__(timeout=5.0)
        self.responses: Dict[str, List[Any]] = {}
        self.streams: List[Dict[str, Any]] = [
            {"codec_type": "video", "width": 1280, "height": 720, "r_frame_rate": "60/1"},
            {"codec_type": "audio"},
        ]
        self.duration = 12.0
        self.create_outputs = True

    def respond(self, program: str, *results: Any) -> None:
        self.responses.setdefault(program, []).extend(results)

    def programs(self) -> List[str]:
        return [args[0] for args in self.history]

    def commands(self, program: str) -> List[List[str]]:
        return [args for args in self.history if args[0] == program]

    def run(self, args, log_prefix: str = "", **kwargs) -> CommandResult:
        args = [str(a) for a in args]
        self.history.append(args)

        queue = self.responses.get(args[0])
        if queue:
            scripted = queue.pop(0) if len(queue) > 1 else queue[0]
            if isinstance(scripted, Exception):
                raise scripted
            return CommandResult(
                command=args,
                returncode=scripted.returncode,
                stdout=scripted.stdout,
                stderr=scripted.stderr,
            )

        if args[0] == "ffmpeg" and self.create_outputs:
            Path(args[-1]).write_bytes(b"media")

        detached = kwargs.get("detached", False)
        return CommandResult(
            command=args,
            returncode=None if detached else 0,
            pid=4242 if detached else None,
            detached=detached,
        )

    def probe_streams(self, path: str) -> List[Dict[str, Any]]:
        self.history.append(["ffprobe", "-show_streams", str(path)])
        return list(self.streams)

    def probe_duration(self, path: str) -> float:
        self.history.append(["ffprobe", "-show_entries", str(path)])
        return self.duration


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture
def workspace(tmp_path):
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path, workspace):
    return ServerConfig(
        api_url="https://api.bolide.test",
        api_token="test-token",
        workspace_paths=str(workspace),
        applications_dir=str(tmp_path / "Applications"),
    )


@pytest.fixture
def project(workspace):
    """A scaffolded project tree."""
    root = workspace / "marketing"
    for sub in ("assets/posts", "assets/research", "artifacts", "screencasts"):
        (root / sub).mkdir(parents=True)
    return root


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def make_ctx(config, runner):
    """
    Factory for ToolContext with fakes.

    ``handler`` answers HTTP requests; ``switches`` feeds the gate.
    """
    def _make(
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
        switches: Optional[Dict[str, str]] = None,
        **overrides: Any,
    ) -> ToolContext:
        for key, value in overrides.items():
            setattr(config, key, value)

        transport = RecordingTransport(handler or (lambda request: json_response({"success": True})))
        ctx = ToolContext.create(
            config,
            gate=EnablementGate(switches or {}),
            runner=runner,
            transport=transport,
        )
        ctx.sleep = lambda seconds: None
        ctx.transport = transport
        return ctx

    return _make


@pytest.fixture
def ctx(make_ctx):
    return make_ctx()


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content.decode("utf-8"))
