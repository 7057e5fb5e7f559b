"""
Configuration Tests
-------------------
YAML file, environment overrides and workspace path resolution.
"""

from pathlib import Path

import pytest

from core.errors import ConfigurationError, ValidationError
from infra.config import DEFAULT_API_URL, ServerConfig
from infra.workspace import (
    get_artifacts_path,
    get_assets_path,
    get_gifs_path,
    get_project_path,
    get_screencasts_path,
    get_workspace_path,
)


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig.load(env={})
        assert config.api_url == DEFAULT_API_URL
        assert config.api_token is None
        assert config.project_dir_name == "marketing"
        assert config.request_timeout_seconds == 30.0
        assert config.debug is False

    def test_environment_overrides(self):
        config = ServerConfig.load(env={
            "BOLIDEAI_API_URL": "https://example.test/api/",
            "BOLIDEAI_API_TOKEN": "secret",
            "WORKSPACE_FOLDER_PATHS": "/work",
            "BOLIDEAI_REQUEST_TIMEOUT": "12.5",
        })
        assert config.api_url == "https://example.test/api"
        assert config.api_token == "secret"
        assert config.workspace_paths == "/work"
        assert config.request_timeout_seconds == 12.5

    def test_yaml_file_with_server_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  project_dir_name: launch\n  log_level: warning\n")

        config = ServerConfig.load(env={}, config_path=str(path))
        assert config.project_dir_name == "launch"
        assert config.log_level == "WARNING"

    def test_environment_beats_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("api_url: https://from-yaml.test\n")

        config = ServerConfig.load(env={"BOLIDEAI_API_URL": "https://from-env.test"}, config_path=str(path))
        assert config.api_url == "https://from-env.test"

    def test_debug_switch_forces_debug_logging(self):
        config = ServerConfig.load(env={"BOLIDEAI_MCP_DEBUG": "true"})
        assert config.debug is True
        assert config.log_level == "DEBUG"

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("unknown_key: 1\n")
        assert ServerConfig.load(env={}, config_path=str(path)).api_token is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Config file not found"):
            ServerConfig.load(env={}, config_path=str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ServerConfig.load(env={}, config_path=str(path))

    def test_non_numeric_timeout(self):
        with pytest.raises(ConfigurationError, match="request_timeout_seconds"):
            ServerConfig.load(env={"BOLIDEAI_REQUEST_TIMEOUT": "soon"})

    def test_companion_app_paths(self):
        config = ServerConfig(applications_dir="/Apps", companion_app_name="Helper")
        assert config.companion_app_path == "/Apps/Helper.app"
        assert config.companion_app_binary == "/Apps/Helper.app/Contents/MacOS/Helper"

    def test_redacted_masks_token(self):
        assert ServerConfig(api_token="secret").redacted()["api_token"] == "***"


class TestWorkspacePaths:

    def test_missing_workspace(self):
        with pytest.raises(ValidationError, match="WORKSPACE_FOLDER_PATHS is not set"):
            get_workspace_path(ServerConfig())

    def test_single_path(self):
        assert get_workspace_path(ServerConfig(workspace_paths="/work/site")) == Path("/work/site")

    def test_comma_separated_uses_parent_of_first(self):
        config = ServerConfig(workspace_paths="/work/site/app, /work/site/docs")
        assert get_workspace_path(config) == Path("/work/site")

    def test_project_subpaths(self):
        config = ServerConfig(workspace_paths="/work")
        assert get_project_path(config) == Path("/work/marketing")
        assert get_screencasts_path(config) == Path("/work/marketing/screencasts")
        assert get_gifs_path(config) == Path("/work/marketing/gifs")
        assert get_artifacts_path(config) == Path("/work/marketing/artifacts")
        assert get_assets_path(config) == Path("/work/marketing/assets")
