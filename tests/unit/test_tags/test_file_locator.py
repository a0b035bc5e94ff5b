"""Tests for FileLocator — lookup through each index format."""

from __future__ import annotations

from pathlib import Path

import pytest

from projnav.core.config import ProjnavConfig
from projnav.core.errors import InvalidPatternError
from projnav.core.project import ProjectRecord
from projnav.tags.locator import FileLocator
from projnav.tags.table import write_manual_tags


@pytest.fixture()
def project(tmp_project: Path) -> ProjectRecord:
    return ProjectRecord("app", str(tmp_project))


@pytest.fixture()
def locator(config: ProjnavConfig) -> FileLocator:
    return FileLocator(config)


class TestWalk:
    def test_matches_and_sorts(self, locator, project):
        assert locator.find_files(project, r"\.go$") == ["src/main.go", "src/util.go"]

    def test_excluded_dirs_are_pruned(self, locator, project):
        assert not any("node_modules" in f for f in locator.find_files(project, "."))

    def test_pattern_applies_to_base_name(self, locator, project):
        assert locator.find_files(project, "^src") == []

    def test_custom_exclusions(self, config, project, tmp_project):
        config.walk.exclude_dirs = ["src"]
        locator = FileLocator(config)
        assert locator.find_files(project, r"\.go$") == ["node_modules/dep/index.go"]

    def test_invalid_pattern(self, locator, project):
        with pytest.raises(InvalidPatternError):
            locator.find_files(project, "[unclosed")


class TestTagsTable:
    def test_uses_indexed_files_only(self, locator, project, tmp_project):
        write_manual_tags(tmp_project / "TAGS", ["zz/late.go", "src/main.go", "gone.go"])
        assert locator.find_files(project, r"\.go$") == ["gone.go", "src/main.go", "zz/late.go"]

    def test_table_stays_loaded(self, locator, project, tmp_project):
        write_manual_tags(tmp_project / "TAGS", ["src/main.go"])
        locator.find_files(project, "main")
        assert locator.cache.loaded.project_name == "app"

    def test_loading_other_project_evicts(self, locator, project, tmp_project, tmp_path):
        write_manual_tags(tmp_project / "TAGS", ["src/main.go"])
        other_root = tmp_path / "other"
        write_manual_tags(other_root / "TAGS", ["lib.go"])
        other = ProjectRecord("other", str(other_root))

        locator.find_files(project, "main")
        assert locator.find_files(other, r"\.go$") == ["lib.go"]
        assert locator.cache.loaded.project_name == "other"

    def test_configured_tags_outside_root(self, locator, tmp_project, tmp_path):
        tags = tmp_path / "tags" / "app.TAGS"
        write_manual_tags(tags, [(tmp_project / "src" / "main.go").as_posix()])
        project = ProjectRecord("app", str(tmp_project), tags_path=str(tags))
        assert locator.find_files(project, "main") == ["src/main.go"]


class TestAlternateIndex:
    def test_query_output_passed_through(self, config, project, tmp_project):
        (tmp_project / "GTAGS").write_bytes(b"\0")
        config.index.query_command = "echo found {pattern}"
        locator = FileLocator(config)
        assert locator.find_files(project, "main.*") == ["found main.*\n"]

    def test_literal_braces_in_query_command(self, config, project, tmp_project):
        (tmp_project / "GTAGS").write_bytes(b"\0")
        config.index.query_command = "awk 'BEGIN { print ARGV[1] }' {pattern}"
        locator = FileLocator(config)
        assert locator.find_files(project, "main.*") == ["main.*\n"]

    def test_missing_query_tool(self, config, project, tmp_project, caplog):
        (tmp_project / "GTAGS").write_bytes(b"\0")
        config.index.query_command = "projnav-no-such-global -P {pattern}"
        locator = FileLocator(config)
        assert locator.find_files(project, "main") == []
        assert "Index query tool not found" in caplog.text
