"""Configuration system for projnav using Pydantic."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RegistryConfig(BaseModel):
    """Where the project registry is persisted."""

    path: str = "~/.projnav/projects.json"

    def registry_file(self) -> Path:
        return Path(self.path).expanduser()


class NavigationConfig(BaseModel):
    """Project history bookkeeping."""

    history_size: int = Field(default=16, ge=1)


class IndexConfig(BaseModel):
    """Tags index naming and external tool commands.

    ``index_command`` receives the enumerated file list on stdin; each
    ``{tags}`` in it is replaced by the tags path.  Each ``{pattern}`` in
    ``query_command`` is replaced by the search pattern.  Both are
    substituted shell-quoted; any other braces are passed through as-is.
    """

    tags_filename: str = "TAGS"
    alternate_filename: str = "GTAGS"
    index_command: str = "etags -o {tags} -"
    query_command: str = "global -P {pattern}"
    rebuild_timeout: float = 300.0
    state_dir: str = "~/.projnav"

    def log_dir(self) -> Path:
        return Path(self.state_dir).expanduser() / "logs"


class WalkConfig(BaseModel):
    """Filesystem walk used when a project has no index."""

    exclude_dirs: list[str] = Field(
        default_factory=lambda: [
            ".git", ".hg", ".svn", ".bzr", "_darcs", "CVS",
            "node_modules", "bower_components", "vendor",
            "__pycache__", "venv", ".venv", ".tox", ".eggs",
            ".mypy_cache", ".pytest_cache", ".ruff_cache",
            "build", "dist", "target", "out", "_build",
        ]
    )


class ProjnavConfig(BaseModel):
    """Root configuration model."""

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    navigation: NavigationConfig = Field(default_factory=NavigationConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    walk: WalkConfig = Field(default_factory=WalkConfig)


class EnvSettings(BaseSettings):
    """Environment variable overrides."""

    model_config = SettingsConfigDict(
        env_prefix="PROJNAV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    registry_path: str | None = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dicts, override wins on conflicts."""
    result = {**base}
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file, return empty dict if not found."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def load_config(
    project_dir: Path | None = None,
    global_config_dir: Path | None = None,
) -> ProjnavConfig:
    """Load configuration with layered precedence.

    Order (later overrides earlier):
    1. Built-in defaults (Pydantic defaults)
    2. ~/.projnav/config.yaml (global user config)
    3. .projnav/config.yaml (project-level config)
    4. Environment variables
    """
    global_config_dir = global_config_dir or (Path.home() / ".projnav")
    project_config_dir = (project_dir or Path.cwd()) / ".projnav"

    merged: dict[str, Any] = {}
    for config_path in [
        global_config_dir / "config.yaml",
        project_config_dir / "config.yaml",
    ]:
        layer = load_yaml_config(config_path)
        merged = _deep_merge(merged, layer)

    config = ProjnavConfig(**merged)

    env = EnvSettings()
    if env.registry_path:
        config = config.model_copy(
            update={"registry": config.registry.model_copy(update={"path": env.registry_path})}
        )

    return config
