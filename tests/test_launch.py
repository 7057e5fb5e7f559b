"""
Launch Tool Tests
-----------------
Companion app status, launch, escalating stop and toolchain install.
"""

import pytest

from core.errors import CommandError, DependencyError
from tools.launch import (
    check_companion_app_status,
    extract_project_path,
    install_brew_and_ffmpeg,
    launch_companion_app,
    stop_companion_app,
)
from tools.registry import NoParams

from conftest import command_result

APP = "Bolide AI Companion"
RUNNING = command_result(stdout=f"4242 {APP}\n4243 {APP} Helper\n")
NOT_RUNNING = command_result(returncode=1)


class TestExtractProjectPath:

    def test_cut_after_project_directory(self):
        title = f"{APP} (/Users/me/site/marketing/artifacts/chat)"
        assert extract_project_path(title, APP, "marketing") == "/Users/me/site/marketing"

    def test_full_path_without_project_directory(self):
        assert extract_project_path(f"{APP} (/Users/me/other)", APP, "marketing") == "/Users/me/other"

    def test_no_match(self):
        assert extract_project_path("Finder", APP, "marketing") is None


class TestCheckStatus:

    def test_not_running(self, ctx, runner):
        runner.respond("pgrep", NOT_RUNNING)
        text = check_companion_app_status(ctx, NoParams()).joined_text
        assert "Companion app status: NOT RUNNING" in text
        assert "osascript" not in runner.programs()

    def test_running_without_window(self, ctx, runner):
        runner.respond("pgrep", RUNNING)
        runner.respond("osascript", command_result(stdout="missing value\n"))

        text = check_companion_app_status(ctx, NoParams()).joined_text
        assert text.startswith("Companion app status: RUNNING\n")
        assert "Found 2 running companion app processes" in text

    def test_running_with_same_project(self, ctx, runner, workspace):
        runner.respond("pgrep", RUNNING)
        runner.respond("osascript", command_result(stdout=f"{APP} ({workspace}/marketing/artifacts)\n"))

        text = check_companion_app_status(ctx, NoParams()).joined_text
        assert "RUNNING WITH SAME PROJECT" in text
        assert f"Running project directory: {workspace}/marketing" in text

    def test_running_with_different_project(self, ctx, runner):
        runner.respond("pgrep", RUNNING)
        runner.respond("osascript", command_result(stdout=f"Settings, {APP} (/elsewhere/marketing)\n"))

        text = check_companion_app_status(ctx, NoParams()).joined_text
        assert "RUNNING WITH DIFFERENT PROJECT" in text
        assert "DO NOT STOP" in text

    def test_pgrep_missing_means_not_running(self, ctx, runner):
        runner.respond("pgrep", CommandError("Command not found: pgrep"))
        assert "NOT RUNNING" in check_companion_app_status(ctx, NoParams()).joined_text


class TestLaunch:

    def test_launches_detached_with_project(self, ctx, runner, config, workspace):
        response = launch_companion_app(ctx, NoParams())

        assert runner.history[-1] == [config.companion_app_binary, "-p", str(workspace / "marketing")]
        assert len(response.content) == 2
        assert "launched successfully" in response.content[0].text

    def test_launch_failure_raises(self, ctx, runner, config):
        runner.respond(config.companion_app_binary, DependencyError(f"Command not found: {config.companion_app_binary}"))
        with pytest.raises(DependencyError):
            launch_companion_app(ctx, NoParams())


class TestStop:

    def test_nothing_to_stop(self, ctx, runner):
        runner.respond("pgrep", NOT_RUNNING)
        text = stop_companion_app(ctx, NoParams()).joined_text
        assert text == "No running companion app processes found - nothing to stop"
        assert "pkill" not in runner.programs()

    def test_escalation_stops_when_processes_gone(self, ctx, runner):
        runner.respond("pgrep", RUNNING, RUNNING, NOT_RUNNING)

        text = stop_companion_app(ctx, NoParams()).joined_text

        assert runner.commands("pkill") == [["pkill", "-f", APP]]
        assert runner.commands("osascript") == [["osascript", "-e", f'tell application "{APP}" to quit']]
        assert text.endswith("All companion app processes successfully stopped")

    def test_force_kill_and_warning(self, ctx, runner, config):
        runner.respond("pgrep", RUNNING)

        text = stop_companion_app(ctx, NoParams()).joined_text

        assert runner.commands("pkill")[-1] == ["pkill", "-9", "-f", config.companion_app_path]
        assert "Attempted force kill using full app path" in text
        assert "Warning: 2 companion app processes still running" in text

    def test_settles_between_steps(self, ctx, runner):
        pauses = []
        ctx.sleep = pauses.append
        runner.respond("pgrep", RUNNING, NOT_RUNNING)

        stop_companion_app(ctx, NoParams())
        assert pauses == [0.5]


class TestInstall:

    def test_success(self, ctx, runner):
        response = install_brew_and_ffmpeg(ctx, NoParams())
        assert runner.programs() == ["/bin/bash", "brew"]
        assert response.content[0].text == "Successfully installed Homebrew and FFmpeg!"

    def test_homebrew_failure(self, ctx, runner):
        runner.respond("/bin/bash", command_result(returncode=1, stderr="curl: (6) Could not resolve host"))

        with pytest.raises(CommandError, match="Homebrew installation failed: curl"):
            install_brew_and_ffmpeg(ctx, NoParams())
        assert "brew" not in runner.programs()

    def test_ffmpeg_failure_mentions_homebrew_success(self, ctx, runner):
        runner.respond("brew", command_result(returncode=1, stderr="No available formula"))

        with pytest.raises(CommandError, match="Homebrew was installed successfully"):
            install_brew_and_ffmpeg(ctx, NoParams())
