"""
Asset Tool Tests
----------------
Post and research markdown assets.
"""

import pytest

from core.errors import ValidationError
from tools.assets import (
    CreatePostAssetParams,
    CreateResearchAssetParams,
    create_post_asset,
    create_research_asset,
    markdown_name,
)


class TestMarkdownName:

    def test_extension_added(self):
        assert markdown_name("launch") == "launch.md"

    def test_extension_not_doubled(self):
        assert markdown_name("launch.md") == "launch.md"


class TestCreateAssets:

    def test_post_asset(self, ctx, project):
        result = create_post_asset(ctx, CreatePostAssetParams(name="launch", content="We shipped!"))

        path = project / "assets" / "posts" / "launch.md"
        assert path.read_text() == "We shipped!"
        assert result == {
            "success": True,
            "filePath": str(path),
            "message": f"Successfully created post asset at {path}",
            "name": "launch",
            "textLength": 11,
        }

    def test_research_asset(self, ctx, project):
        create_research_asset(ctx, CreateResearchAssetParams(name="market", content="# Findings"))
        assert (project / "assets" / "research" / "market.md").read_text() == "# Findings"

    def test_directory_created_when_missing(self, ctx, workspace):
        create_post_asset(ctx, CreatePostAssetParams(name="launch", content="x"))
        assert (workspace / "marketing" / "assets" / "posts" / "launch.md").exists()

    def test_refuses_to_overwrite(self, ctx, project):
        (project / "assets" / "research" / "market.md").write_text("old")

        with pytest.raises(ValidationError, match="Research asset already exists"):
            create_research_asset(ctx, CreateResearchAssetParams(name="market", content="new"))
        assert (project / "assets" / "research" / "market.md").read_text() == "old"

    def test_name_escaping_assets_rejected(self, ctx, project):
        with pytest.raises(ValidationError, match="Invalid name"):
            create_post_asset(ctx, CreatePostAssetParams(name="../../../../outside", content="x"))
        assert not (project.parent.parent / "outside.md").exists()
