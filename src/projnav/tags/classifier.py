"""Decide which index format a project currently uses."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from projnav.core.config import IndexConfig
from projnav.core.project import ProjectRecord


class IndexKind(str, Enum):
    EXPLICIT = "explicit"    # etags-style file, configured or found at the root
    ALTERNATE = "alternate"  # GNU GLOBAL database at the root
    NONE = "none"            # no index: walk the filesystem


def classify(project: ProjectRecord, config: IndexConfig | None = None) -> IndexKind:
    """Classify *project*'s index.

    Never cached: the index may be regenerated or deleted between calls.
    A configured tags file takes precedence over an alternate index.
    """
    config = config or IndexConfig()
    if project.tags_path and Path(project.tags_path).is_file():
        return IndexKind.EXPLICIT
    root = Path(project.root_dir)
    if (root / config.alternate_filename).is_file():
        return IndexKind.ALTERNATE
    if (root / config.tags_filename).is_file():
        return IndexKind.EXPLICIT
    return IndexKind.NONE


def active_tags_file(project: ProjectRecord, config: IndexConfig | None = None) -> Path | None:
    """The tags file an EXPLICIT classification refers to, if any."""
    config = config or IndexConfig()
    if project.tags_path and Path(project.tags_path).is_file():
        return Path(project.tags_path)
    candidate = Path(project.root_dir) / config.tags_filename
    return candidate if candidate.is_file() else None
