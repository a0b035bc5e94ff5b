"""Shared test fixtures for projnav."""

import pytest

from projnav.core.config import IndexConfig, ProjnavConfig, RegistryConfig


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config, registry and logs out of the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("PROJNAV_REGISTRY_PATH", raising=False)
    monkeypatch.delenv("PROJNAV_LOG_LEVEL", raising=False)
    return home


@pytest.fixture
def tmp_project(tmp_path):
    """Create a temporary project directory with basic structure."""
    root = tmp_path / "app"
    (root / "src").mkdir(parents=True)
    (root / "src" / "main.go").write_text("package main\n")
    (root / "src" / "util.go").write_text("package main\n")
    (root / "README.md").write_text("# Test Project\n")
    (root / "node_modules" / "dep").mkdir(parents=True)
    (root / "node_modules" / "dep" / "index.go").write_text("package dep\n")
    return root


@pytest.fixture
def config(tmp_path):
    """Config whose registry and logs live under tmp_path."""
    return ProjnavConfig(
        registry=RegistryConfig(path=str(tmp_path / "state" / "projects.json")),
        index=IndexConfig(state_dir=str(tmp_path / "state")),
    )
