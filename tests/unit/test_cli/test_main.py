"""Tests for projnav.__main__ — CLI entry point dispatch and commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture()
def registry_file(tmp_path, monkeypatch) -> Path:
    path = tmp_path / "state" / "projects.json"
    monkeypatch.setenv("PROJNAV_REGISTRY_PATH", str(path))
    return path


def _run(*argv: str) -> None:
    with patch("sys.argv", ["projnav", *argv]):
        from projnav.__main__ import main
        main()


# ── main() dispatch ───────────────────────────────────────────────────────────


class TestMainDispatch:
    def test_no_args_prints_help(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _run()
        assert exc_info.value.code == 0
        assert "Usage: projnav" in capsys.readouterr().out

    def test_unknown_command_exits_with_error(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _run("frobnicate")
        assert exc_info.value.code == 1
        assert "Unknown command" in capsys.readouterr().out

    def test_unknown_flag_exits_with_error(self, registry_file) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _run("find", "x", "--bogus")
        assert exc_info.value.code == 1

    def test_invalid_log_level_is_reported(self, registry_file, monkeypatch, capsys) -> None:
        monkeypatch.setenv("PROJNAV_LOG_LEVEL", "verbose")
        with pytest.raises(SystemExit) as exc_info:
            _run("list")
        assert exc_info.value.code == 1
        assert "PROJNAV_LOG_LEVEL" in capsys.readouterr().err


# ── Commands ──────────────────────────────────────────────────────────────────


class TestRegistryCommands:
    def test_add_persists_record(self, registry_file, tmp_project) -> None:
        _run("add", "app", str(tmp_project), "--cursor", "src")
        data = json.loads(registry_file.read_text())
        assert data == [["app", str(tmp_project), "src", None, None]]

    def test_add_file_flag(self, registry_file, tmp_project) -> None:
        _run("add", "app", str(tmp_project), "--cursor", "src/main.go", "--file")
        assert json.loads(registry_file.read_text())[0][4] is True

    def test_add_duplicate_fails(self, registry_file, tmp_project) -> None:
        _run("add", "app", str(tmp_project))
        with pytest.raises(SystemExit) as exc_info:
            _run("add", "app", str(tmp_project / "src"))
        assert exc_info.value.code == 1

    def test_add_replace(self, registry_file, tmp_project) -> None:
        _run("add", "app", str(tmp_project))
        _run("add", "app", str(tmp_project / "src"), "--replace")
        data = json.loads(registry_file.read_text())
        assert data == [["app", str(tmp_project / "src"), "", None, None]]

    def test_remove(self, registry_file, tmp_project) -> None:
        _run("add", "app", str(tmp_project))
        _run("remove", "app")
        assert json.loads(registry_file.read_text()) == []

    def test_remove_unknown_fails(self, registry_file) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _run("remove", "nope")
        assert exc_info.value.code == 1

    def test_list(self, registry_file, tmp_project, capsys) -> None:
        _run("add", "zeta", str(tmp_project))
        _run("add", "alpha", str(tmp_project / "src"))
        capsys.readouterr()
        _run("list")
        out = capsys.readouterr().out
        assert out.index("alpha") < out.index("zeta")

    def test_malformed_registry_is_reported(self, registry_file, capsys) -> None:
        registry_file.parent.mkdir(parents=True)
        registry_file.write_text("not json")
        with pytest.raises(SystemExit) as exc_info:
            _run("list")
        assert exc_info.value.code == 1
        assert "projects.json" in capsys.readouterr().err


class TestLookupCommands:
    def test_which(self, registry_file, tmp_project, capsys) -> None:
        _run("add", "app", str(tmp_project))
        capsys.readouterr()
        _run("which", str(tmp_project / "src"))
        assert capsys.readouterr().out.startswith("app  ")

    def test_which_outside_projects(self, registry_file, tmp_path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _run("which", str(tmp_path))
        assert exc_info.value.code == 1

    def test_find(self, registry_file, tmp_project, capsys) -> None:
        _run("add", "app", str(tmp_project))
        capsys.readouterr()
        _run("find", r"\.go$", "--project", "app")
        assert capsys.readouterr().out.splitlines() == ["src/main.go", "src/util.go"]

    def test_find_by_dir(self, registry_file, tmp_project, capsys) -> None:
        _run("add", "app", str(tmp_project))
        capsys.readouterr()
        _run("find", "README", "--dir", str(tmp_project / "src"))
        assert capsys.readouterr().out.splitlines() == ["README.md"]

    def test_classify(self, registry_file, tmp_project, capsys) -> None:
        _run("add", "app", str(tmp_project))
        (tmp_project / "TAGS").write_text("")
        capsys.readouterr()
        _run("classify", "--project", "app")
        assert capsys.readouterr().out.strip() == "app: explicit"

    def test_tags_rebuild(self, registry_file, tmp_project) -> None:
        _run("add", "app", str(tmp_project))
        with patch(
            "projnav.core.workspace.Workspace.rebuild_sync",
            autospec=True,
        ) as mock_rebuild:
            mock_rebuild.return_value.synthesized = False
            mock_rebuild.return_value.exit_code = 0
            mock_rebuild.return_value.tags_path = str(tmp_project / "TAGS")
            _run("tags", "--project", "app")
        mock_rebuild.assert_called_once()
        assert mock_rebuild.call_args.args[1].name == "app"
