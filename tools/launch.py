"""
Launch Tools
------------
Start, stop and inspect the companion app used to capture screenshots
and videos for a project, and install the media toolchain.
"""

from typing import TYPE_CHECKING, List, Optional
import logging
import re

from core.errors import CommandError
from core.gate import ToolGroup
from infra.workspace import get_project_path

from .dispatcher import ToolResponse
from .registry import NoParams, ToolDescriptor

if TYPE_CHECKING:
    from .catalog import ToolContext

logger = logging.getLogger("bolide.tools.launch")

SETTLE_SECONDS = 0.5

HOMEBREW_INSTALL = [
    "/bin/bash",
    "-c",
    "curl -fsSL https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh | bash",
]


def list_app_processes(ctx: "ToolContext") -> List[str]:
    """Lines of `pgrep -l` for the companion app; empty when none run."""
    try:
        result = ctx.runner.run(["pgrep", "-l", ctx.config.companion_app_name], log_prefix="Check processes")
    except CommandError as e:
        logger.debug(f"pgrep unavailable: {e.message}")
        return []

    if not result.success:
        return []
    return [line for line in result.stdout.strip().split("\n") if line]


def get_window_title(ctx: "ToolContext") -> Optional[str]:
    """Title of the first companion app window, if any."""
    app_name = ctx.config.companion_app_name
    script = (
        f'tell application "System Events" to get name of every window '
        f'of application process "{app_name}"'
    )
    try:
        result = ctx.runner.run(["osascript", "-e", script], log_prefix="Read window titles")
    except CommandError as e:
        logger.debug(f"osascript unavailable: {e.message}")
        return None

    if not result.success:
        return None

    window_names = result.stdout.strip()
    logger.info(f"Window names: {window_names}")
    if not window_names or window_names == "missing value":
        return None

    matching = [name for name in window_names.split(", ") if app_name in name]
    return matching[0] if matching else None


def extract_project_path(window_title: str, app_name: str, project_dir_name: str) -> Optional[str]:
    """
    Project path shown in a window title like ``<App> (/path/to/project/...)``.

    The path is cut right after the project directory segment when present.
    """
    match = re.search(rf"{re.escape(app_name)} \((.+)\)", window_title.strip())
    if not match:
        return None

    full_path = match.group(1)
    parts = full_path.split("/")
    if project_dir_name in parts:
        index = parts.index(project_dir_name)
        if index > 0:
            return "/".join(parts[: index + 1])
    return full_path


def check_companion_app_status(ctx: "ToolContext", params: NoParams) -> ToolResponse:
    logger.info("Checking companion app status")
    project_path = str(get_project_path(ctx.config))

    processes = list_app_processes(ctx)
    if not processes:
        return ToolResponse.text(
            "Companion app status: NOT RUNNING\n\n"
            "No companion app processes found. The app can be safely launched."
        )

    listing = f"Found {len(processes)} running companion app processes:\n" + "\n".join(processes)

    window_title = get_window_title(ctx)
    logger.info(f"Window title: {window_title}")
    running_path = (
        extract_project_path(window_title, ctx.config.companion_app_name, ctx.config.project_dir_name)
        if window_title
        else None
    )

    if running_path is None:
        return ToolResponse.text(
            f"Companion app status: RUNNING\n\n{listing}\n\n"
            "The app is currently active but project directory could not be determined. "
            "Use stop_companion_app to terminate before launching a new instance."
        )

    directories = (
        f"Current project directory: {project_path}\n"
        f"Running project directory: {running_path}\n"
        f"Window title: {window_title}"
    )

    if running_path == project_path:
        return ToolResponse.text(
            f"Companion app status: RUNNING WITH SAME PROJECT\n\n{listing}\n\n{directories}\n\n"
            "The app is currently active with the same project directory. "
            "Use stop_companion_app to terminate before launching a new instance."
        )

    return ToolResponse.text(
        f"Companion app status: RUNNING WITH DIFFERENT PROJECT\n\n{listing}\n\n{directories}\n\n"
        "The app is currently active with a different project directory. "
        "DO NOT STOP this instance - it belongs to another project."
    )


def launch_companion_app(ctx: "ToolContext", params: NoParams) -> ToolResponse:
    logger.info("Launching companion app")
    project_path = str(get_project_path(ctx.config))

    result = ctx.runner.run(
        [ctx.config.companion_app_binary, "-p", project_path],
        log_prefix="Launch companion app",
        detached=True,
    )
    if not result.success:
        raise CommandError(f"Launch companion app failed: {result.error}", command=result.command)

    return ToolResponse.text(
        f"Companion app launched successfully with project directory: {project_path}",
        "The companion app will:\n"
        "1. Allow you to start / stop screenshot capture for project artifacts\n"
        "2. Allow you to start / stop video recording for project artifacts\n"
        f"3. Save all project artifacts to: {project_path}\n\n"
        "Next Steps:\n"
        "1. User may request to stop the companion app at any time",
    )


def stop_companion_app(ctx: "ToolContext", params: NoParams) -> ToolResponse:
    logger.info("Stopping companion app")
    app_name = ctx.config.companion_app_name

    before = list_app_processes(ctx)
    if not before:
        return ToolResponse.text("No running companion app processes found - nothing to stop")

    results = [f"Found {len(before)} running companion app processes: {', '.join(before)}"]

    # Gentlest first; each step only runs if processes remain
    steps = [
        (["pkill", "-f", app_name], "Attempted to kill processes using pkill"),
        (["osascript", "-e", f'tell application "{app_name}" to quit'],
         "Attempted to quit application using osascript"),
        (["pkill", "-9", "-f", ctx.config.companion_app_path], "Attempted force kill using full app path"),
    ]

    remaining = before
    for args, note in steps:
        if not remaining:
            break
        try:
            ctx.runner.run(args, log_prefix="Stop companion app")
        except CommandError as e:
            results.append(f"{args[0]} unavailable: {e.message}")
            continue
        results.append(note)
        ctx.sleep(SETTLE_SECONDS)
        remaining = list_app_processes(ctx)

    after = list_app_processes(ctx)
    if after:
        results.append(f"Warning: {len(after)} companion app processes still running: {', '.join(after)}")
    else:
        results.append("All companion app processes successfully stopped")

    return ToolResponse.text("\n".join(results))


def install_brew_and_ffmpeg(ctx: "ToolContext", params: NoParams) -> ToolResponse:
    logger.info("Step 1: Installing Homebrew...")
    brew = ctx.runner.run(HOMEBREW_INSTALL, log_prefix="Install Homebrew")
    if not brew.success:
        raise CommandError(f"Homebrew installation failed: {brew.error}", command=brew.command, output=brew.stderr)

    logger.info("Step 2: Installing FFmpeg via Homebrew...")
    ffmpeg = ctx.runner.run(["brew", "install", "ffmpeg"], log_prefix="Install FFmpeg")
    if not ffmpeg.success:
        raise CommandError(
            f"FFmpeg installation failed: {ffmpeg.error}. Homebrew was installed successfully.",
            command=ffmpeg.command,
            output=ffmpeg.stderr,
        )

    return ToolResponse.text(
        "Successfully installed Homebrew and FFmpeg!",
        "Installation completed:\n"
        "1. ✅ Homebrew package manager installed\n"
        "2. ✅ FFmpeg video processing tool installed\n\n"
        "You can now use FFmpeg for video processing tasks. "
        "The system is ready for video capture and processing workflows.",
    )


def descriptors(ctx: "ToolContext") -> List[ToolDescriptor]:
    groups = frozenset({ToolGroup.LAUNCH})
    return [
        ToolDescriptor(
            name="check_companion_app_status",
            description=(
                "Checks whether the companion app is currently running with the same project "
                "directory or not. Use this tool before launching or stopping the companion app "
                "to determine the current state. DO NOT STOP THE APP IF IT IS RUNNING WITH A "
                "DIFFERENT PROJECT DIRECTORY."
            ),
            handler=lambda params: check_companion_app_status(ctx, params),
            groups=groups,
        ),
        ToolDescriptor(
            name="launch_companion_app",
            description=(
                "Launches the companion app for capturing screenshots and videos. IMPORTANT: Use "
                "check_companion_app_status first to verify no instance with the same project "
                "directory is running. DO NOT STOP THE APP IF IT IS RUNNING WITH A DIFFERENT "
                "PROJECT DIRECTORY. Example: launch_companion_app()"
            ),
            handler=lambda params: launch_companion_app(ctx, params),
            groups=groups,
        ),
        ToolDescriptor(
            name="stop_companion_app",
            description=(
                "Stops any running instances of the companion app. IMPORTANT: Use "
                "check_companion_app_status first to verify if the app is running with the same "
                "project directory before attempting to stop it. DO NOT STOP THE APP IF IT IS "
                "RUNNING WITH A DIFFERENT PROJECT DIRECTORY."
            ),
            handler=lambda params: stop_companion_app(ctx, params),
            groups=groups,
        ),
        ToolDescriptor(
            name="install_brew_and_ffmpeg",
            description=(
                "Installs Homebrew package manager and then installs FFmpeg via Homebrew. This tool "
                "handles the complete setup process for video processing dependencies."
            ),
            handler=lambda params: install_brew_and_ffmpeg(ctx, params),
            groups=groups,
        ),
    ]
