"""
Diagnostic Tool
---------------
Reports on the server environment, tool enablement and the companion app.

Only bound when BOLIDEAI_MCP_DEBUG is "true". The same report is printed
by ``main.py --diagnose``.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional
import getpass
import logging
import os
import platform
import sys
import tempfile

from pydantic import Field

from core.gate import GROUP_PREFIX, TOOL_PREFIX, EnablementGate, ToolGroup
from infra.config import SERVER_VERSION, ServerConfig

from .dispatcher import ToolResponse
from .registry import ToolDescriptor, ToolParams

if TYPE_CHECKING:
    from .catalog import ToolContext

logger = logging.getLogger("bolide.tools.diagnostic")

RELEVANT_ENV_VARS = [
    "WORKSPACE_FOLDER_PATHS",
    "BOLIDEAI_API_URL",
    "BOLIDEAI_API_TOKEN",
    "PATH",
    "HOME",
    "USER",
    "TMPDIR",
]


class DiagnosticParams(ToolParams):
    enabled: Optional[bool] = Field(default=None, description="Optional: dummy parameter to satisfy MCP protocol")


def check_binary_availability(binary_path: str) -> bool:
    """True if the path is an executable regular file."""
    return os.path.isfile(binary_path) and os.access(binary_path, os.X_OK)


def environment_variables(env: Mapping[str, str], gate: EnablementGate) -> Dict[str, Optional[str]]:
    values: Dict[str, Optional[str]] = {name: env.get(name) for name in RELEVANT_ENV_VARS}
    if values.get("BOLIDEAI_API_TOKEN"):
        values["BOLIDEAI_API_TOKEN"] = "(set)"
    values.update(gate.switch_values())
    return values


def system_info() -> Dict[str, str]:
    try:
        username = getpass.getuser()
    except (KeyError, OSError):
        username = "unknown"

    return {
        "platform": sys.platform,
        "release": platform.release(),
        "arch": platform.machine(),
        "cpus": str(os.cpu_count() or "unknown"),
        "hostname": platform.node(),
        "username": username,
        "homedir": str(Path.home()),
        "tmpdir": tempfile.gettempdir(),
    }


def python_info() -> Dict[str, str]:
    return {
        "version": platform.python_version(),
        "implementation": platform.python_implementation(),
        "executable": sys.executable,
        "pid": str(os.getpid()),
        "ppid": str(os.getppid()),
        "cwd": os.getcwd(),
        "argv": " ".join(sys.argv),
    }


def _group_lines(gate: EnablementGate) -> List[str]:
    if not gate.is_selective_mode_active():
        return ["- All tool groups are enabled (selective mode is disabled)."]

    lines = []
    for group in ToolGroup:
        status = "✅ Enabled" if gate.is_group_enabled(group) else "❌ Disabled"
        lines.append(f"- {group.display_name}: {status} (Set with {group.switch}=true)")
    return lines


def _tool_lines(gate: EnablementGate) -> List[str]:
    if not gate.is_selective_mode_active():
        return ["- All tools are enabled (selective mode is disabled)."]

    tools = gate.individually_enabled_tools()
    if not tools:
        return ["- No tools are individually enabled via environment variables."]
    return [f"- {tool}: ✅ Enabled (via {TOOL_PREFIX}{tool}=true)" for tool in tools]


def build_report(
    config: ServerConfig,
    gate: EnablementGate,
    env: Optional[Mapping[str, str]] = None,
) -> str:
    """Render the diagnostic report as markdown."""
    env = os.environ if env is None else env
    env_vars = environment_variables(env, gate)
    companion_available = check_binary_availability(config.companion_app_binary)

    lines = [
        "# Bolide AI MCP Diagnostic Report",
        f"\nGenerated: {datetime.now(timezone.utc).isoformat()}",
        f"Server Version: {SERVER_VERSION}",
        "\n## System Information",
        *[f"- {key}: {value}" for key, value in system_info().items()],
        "\n## Python Information",
        *[f"- {key}: {value}" for key, value in python_info().items()],
        "\n## Environment Variables",
        *[f"- {key}: {value or '(not set)'}" for key, value in env_vars.items() if key != "PATH"],
        "\n### PATH",
        "```",
        "\n".join((env_vars.get("PATH") or "(not set)").split(os.pathsep)),
        "```",
        "\n## Tools Status",
        "\n### Tool Groups Status",
        *_group_lines(gate),
        "\n### Individually Enabled Tools",
        *_tool_lines(gate),
        "\n## Utility Availability Summary",
        f"- Companion App: {'✅ Available' if companion_available else '❌ Not available'}"
        f" ({config.companion_app_path})",
        "\n## Troubleshooting Tips",
        "- Ensure the companion app is installed",
        "- To enable specific tool groups, set the appropriate environment variables "
        f"(e.g., `export {GROUP_PREFIX}RESEARCH=true`)",
        "- If you're having issues with environment variables, make sure to use the correct prefix:",
        f"  - Use `{GROUP_PREFIX}NAME=true` to enable a tool group",
        f"  - Use `{TOOL_PREFIX}NAME=true` to enable an individual tool",
        "  - Values are compared exactly: only lowercase `true` enables a switch",
    ]
    return "\n".join(lines)


def run_diagnostic(ctx: "ToolContext", params: DiagnosticParams) -> ToolResponse:
    logger.info("Running diagnostic tool")
    return ToolResponse.text(build_report(ctx.config, ctx.gate))


def descriptors(ctx: "ToolContext") -> List[ToolDescriptor]:
    return [
        ToolDescriptor(
            name="diagnostic",
            description=(
                "Provides comprehensive information about the MCP server environment, available "
                "dependencies, and configuration status."
            ),
            handler=lambda params: run_diagnostic(ctx, params),
            parameter_schema=DiagnosticParams,
            groups=frozenset({ToolGroup.DIAGNOSTICS}),
            requires_debug=True,
        ),
    ]
