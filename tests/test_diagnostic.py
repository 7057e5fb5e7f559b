"""
Diagnostic Tool Tests
---------------------
Report content and debug-only registration.
"""

import asyncio
import os

from core.gate import DEBUG_SWITCH, EnablementGate, ToolGroup
from infra.config import SERVER_VERSION
from tools.diagnostic import (
    DiagnosticParams,
    build_report,
    check_binary_availability,
    descriptors,
    environment_variables,
    run_diagnostic,
)
from tools.dispatcher import Dispatcher


class TestBinaryAvailability:

    def test_executable_file(self, tmp_path):
        binary = tmp_path / "app"
        binary.write_text("#!/bin/sh\n")
        binary.chmod(0o755)
        assert check_binary_availability(str(binary)) is True

    def test_not_executable(self, tmp_path):
        binary = tmp_path / "app"
        binary.write_text("")
        binary.chmod(0o644)
        assert check_binary_availability(str(binary)) is False

    def test_missing(self, tmp_path):
        assert check_binary_availability(str(tmp_path / "missing")) is False


class TestReport:

    def test_open_mode_report(self, config):
        report = build_report(config, EnablementGate({}), env={"PATH": os.pathsep.join(["/usr/bin", "/bin"])})

        assert report.startswith("# Bolide AI MCP Diagnostic Report")
        assert f"Server Version: {SERVER_VERSION}" in report
        assert "## Python Information" in report
        assert "```\n/usr/bin\n/bin\n```" in report
        assert "All tool groups are enabled (selective mode is disabled)." in report
        assert "All tools are enabled (selective mode is disabled)." in report
        assert "Companion App: ❌ Not available" in report

    def test_selective_mode_report(self, config):
        gate = EnablementGate({
            ToolGroup.RESEARCH.switch: "true",
            "BOLIDEAI_MCP_TOOL_GENERATE_GIF": "true",
        })
        report = build_report(config, gate, env={})

        assert "- RESEARCH: ✅ Enabled (Set with BOLIDEAI_MCP_GROUP_RESEARCH=true)" in report
        assert "- SLACK: ❌ Disabled (Set with BOLIDEAI_MCP_GROUP_SLACK=true)" in report
        assert "- GENERATE_GIF: ✅ Enabled (via BOLIDEAI_MCP_TOOL_GENERATE_GIF=true)" in report
        assert "- BOLIDEAI_MCP_GROUP_RESEARCH: true" in report

    def test_selective_mode_without_tool_switches(self, config):
        report = build_report(config, EnablementGate({ToolGroup.SLACK.switch: "true"}), env={})
        assert "No tools are individually enabled via environment variables." in report

    def test_token_never_shown(self, config):
        env_vars = environment_variables({"BOLIDEAI_API_TOKEN": "secret-value"}, EnablementGate({}))
        assert env_vars["BOLIDEAI_API_TOKEN"] == "(set)"

    def test_unset_variables_marked(self, config):
        report = build_report(config, EnablementGate({}), env={})
        assert "- WORKSPACE_FOLDER_PATHS: (not set)" in report

    def test_companion_app_available(self, config, tmp_path):
        binary = tmp_path / "bin"
        binary.mkdir()
        config.applications_dir = str(binary)
        path = binary / f"{config.companion_app_name}.app" / "Contents" / "MacOS" / config.companion_app_name
        path.parent.mkdir(parents=True)
        path.write_text("")
        path.chmod(0o755)

        assert "Companion App: ✅ Available" in build_report(config, EnablementGate({}), env={})


class TestRegistration:

    def test_not_bound_without_debug(self, ctx):
        dispatcher = Dispatcher(EnablementGate({}))
        assert dispatcher.register_all(descriptors(ctx)) == []

    def test_bound_with_debug(self, make_ctx):
        ctx = make_ctx(switches={DEBUG_SWITCH: "true"})
        dispatcher = Dispatcher(ctx.gate)
        assert dispatcher.register_all(descriptors(ctx)) == ["diagnostic"]

        response = asyncio.run(dispatcher.invoke("diagnostic", {"enabled": True}))
        assert response.is_error is False
        assert "Diagnostic Report" in response.joined_text

    def test_handler_uses_context_gate(self, make_ctx):
        ctx = make_ctx(switches={ToolGroup.LINEAR.switch: "true"})
        text = run_diagnostic(ctx, DiagnosticParams()).joined_text
        assert "- LINEAR: ✅ Enabled" in text
