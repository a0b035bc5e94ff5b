"""Project record model."""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass
from typing import Any

from projnav.core import paths

DEFAULT_TAGS_FILENAME = "TAGS"


@dataclass(frozen=True)
class ProjectRecord:
    """A registered project.

    Records are never mutated in place: the registry replaces them by
    deleting the old record and inserting a new one.
    """

    name: str
    root_dir: str
    cursor_subpath: str = ""
    tags_path: str | None = None
    load_as_file: bool | None = None  # open cursor_subpath as a file, not a listing

    def to_tuple(self) -> list[Any]:
        return [self.name, self.root_dir, self.cursor_subpath, self.tags_path, self.load_as_file]

    @staticmethod
    def from_tuple(data: list[Any] | tuple[Any, ...]) -> ProjectRecord:
        """Build a record from a persisted 5-element entry.

        Raises ``ValueError`` when the entry has the wrong shape.
        """
        if not isinstance(data, (list, tuple)) or len(data) != 5:
            raise ValueError(f"expected a 5-element entry, got {data!r}")
        name, root_dir, cursor_subpath, tags_path, load_as_file = data
        if not isinstance(name, str) or not name:
            raise ValueError(f"project name must be a non-empty string: {name!r}")
        if not isinstance(root_dir, str) or not root_dir:
            raise ValueError(f"root dir of '{name}' must be a non-empty string")
        if cursor_subpath is None:
            cursor_subpath = ""
        if not isinstance(cursor_subpath, str):
            raise ValueError(f"cursor subpath of '{name}' must be a string")
        if tags_path is not None and not isinstance(tags_path, str):
            raise ValueError(f"tags path of '{name}' must be a string or null")
        if load_as_file is not None and not isinstance(load_as_file, bool):
            raise ValueError(f"load-as-file flag of '{name}' must be a boolean or null")
        return ProjectRecord(
            name=name,
            root_dir=root_dir,
            cursor_subpath=cursor_subpath,
            tags_path=tags_path,
            load_as_file=load_as_file,
        )

    def _join(self, *parts: str) -> str:
        module = posixpath if paths.is_remote(self.root_dir) else os.path
        return module.join(self.root_dir, *parts)

    def tags_file(self, tags_filename: str = DEFAULT_TAGS_FILENAME) -> str:
        """Configured tags path, or ``<root>/TAGS`` when none is set."""
        if self.tags_path:
            return self.tags_path
        return self._join(tags_filename)

    def landing_path(self) -> str:
        """Where opening the project should land."""
        if not self.cursor_subpath:
            return self.root_dir
        return self._join(self.cursor_subpath)

    def __str__(self) -> str:
        return f"{self.name} ({self.root_dir})"
