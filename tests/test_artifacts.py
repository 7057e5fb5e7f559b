"""
Artifact Tool Tests
-------------------
Timestamped artifact directories and post artifacts.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from core.errors import ValidationError
from tools.artifacts import (
    ARTIFACT_SUBFOLDERS,
    CreateArtifactDirectoryParams,
    CreatePostArtifactParams,
    create_artifact_directory,
    create_post_artifact,
    timestamped_name,
)


class TestTimestampedName:

    def test_format(self):
        now = datetime(2024, 3, 7, 9, 5, 1, tzinfo=timezone.utc)
        assert timestamped_name("chat", now) == "chat-2024-03-07_09-05-01"


class TestCreateArtifactDirectory:

    def test_creates_subfolders(self, ctx, project):
        result = create_artifact_directory(ctx, CreateArtifactDirectoryParams(artifactName="chat"))

        artifact = Path(result["artifactPath"])
        assert artifact.parent == project / "artifacts"
        assert artifact.name.startswith("chat-")
        for sub in ARTIFACT_SUBFOLDERS:
            assert (artifact / sub / ".gitkeep").exists()
        assert result["artifactName"] == "chat"

    def test_requires_artifacts_directory(self, ctx, workspace):
        with pytest.raises(ValidationError, match="Artifacts directory does not exist"):
            create_artifact_directory(ctx, CreateArtifactDirectoryParams(artifactName="chat"))

    def test_name_escaping_artifacts_rejected(self, ctx, project):
        with pytest.raises(ValidationError, match="Invalid artifactName"):
            create_artifact_directory(ctx, CreateArtifactDirectoryParams(artifactName="../../escape"))
        assert list(project.parent.glob("escape-*")) == []

    def test_existing_directory_rejected(self, ctx, project, monkeypatch):
        monkeypatch.setattr("tools.artifacts.timestamped_name", lambda name: f"{name}-fixed")
        (project / "artifacts" / "chat-fixed").mkdir()

        with pytest.raises(ValidationError, match="Artifact directory already exists"):
            create_artifact_directory(ctx, CreateArtifactDirectoryParams(artifactName="chat"))


class TestCreatePostArtifact:

    def _params(self, **overrides):
        values = {"artifactName": "chat-2024-03-07_09-05-01", "fileName": "launch.md", "fileContent": "Hello"}
        values.update(overrides)
        return CreatePostArtifactParams(**values)

    def test_writes_post(self, ctx, project):
        (project / "artifacts" / "chat-2024-03-07_09-05-01").mkdir()

        result = create_post_artifact(ctx, self._params())

        path = project / "artifacts" / "chat-2024-03-07_09-05-01" / "posts" / "launch.md"
        assert path.read_text() == "Hello"
        assert result["filePath"] == str(path)

    def test_missing_artifact_directory(self, ctx, project):
        with pytest.raises(ValidationError, match="Artifact directory does not exist"):
            create_post_artifact(ctx, self._params())

    def test_refuses_to_overwrite(self, ctx, project):
        posts = project / "artifacts" / "chat-2024-03-07_09-05-01" / "posts"
        posts.mkdir(parents=True)
        (posts / "launch.md").write_text("original")

        with pytest.raises(ValidationError, match="Post file already exists"):
            create_post_artifact(ctx, self._params())
        assert (posts / "launch.md").read_text() == "original"

    @pytest.mark.parametrize("overrides,param", [
        ({"fileName": "../../../notes.md"}, "fileName"),
        ({"artifactName": "../assets"}, "artifactName"),
    ])
    def test_names_escaping_parent_rejected(self, ctx, project, overrides, param):
        (project / "artifacts" / "chat-2024-03-07_09-05-01").mkdir()

        with pytest.raises(ValidationError, match=f"Invalid {param}") as exc_info:
            create_post_artifact(ctx, self._params(**overrides))
        assert exc_info.value.param_name == param
        assert not (project / "notes.md").exists()
