"""Tags file parsing and writing, plus the single loaded-table cache.

Tags files use the Emacs etags layout: each file gets a section introduced
by a form feed line, followed by a ``<file>,<size>`` header and the tag
lines for that file::

    ^L
    src/main.go,0

Sections written by :func:`write_manual_tags` carry a zero size and no tag
lines, which is enough for filename-level lookup.
"""

from __future__ import annotations

import logging
import posixpath
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

SECTION_MARK = "\x0c"


def parse_tags(text: str, base_dir: Path | None = None) -> list[str]:
    """Return the file names listed in etags-formatted *text*, in order.

    Names are normalized (``./src/a.go`` becomes ``src/a.go``) and
    duplicate sections are collapsed.  Absolute names under *base_dir* are
    made relative to it.
    """
    files: list[str] = []
    seen: set[str] = set()
    base = base_dir.as_posix().rstrip("/") + "/" if base_dir is not None else None

    # split on newlines only: str.splitlines() also breaks on the form feed
    lines = text.split("\n")
    for i, line in enumerate(lines[:-1]):
        if line != SECTION_MARK:
            continue
        header = lines[i + 1].rstrip("\r")
        name, sep, _size = header.rpartition(",")
        if not sep or not name:
            logger.debug("Malformed tags section header: %r", header)
            continue
        name = posixpath.normpath(name)
        if base is not None and name.startswith(base):
            name = name[len(base):]
        if name not in seen:
            seen.add(name)
            files.append(name)
    return files


def format_manual_tags(files: Iterable[str]) -> str:
    return "".join(f"{SECTION_MARK}\n{name},0\n" for name in files)


def write_manual_tags(path: Path, files: Iterable[str]) -> int:
    """Write one zero-position section per file.  Returns the entry count."""
    names = list(files)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_manual_tags(names), encoding="utf-8")
    return len(names)


@dataclass(frozen=True)
class TagsTable:
    """A tags file loaded into memory."""

    project_name: str
    path: Path
    mtime: float
    files: tuple[str, ...]

    @classmethod
    def read(cls, project_name: str, path: Path, base_dir: Path | None = None) -> TagsTable:
        """Load *path*; absolute entries under *base_dir* (default: its directory) become relative."""
        stat = path.stat()
        text = path.read_text(encoding="utf-8", errors="replace")
        files = parse_tags(text, base_dir=base_dir or path.parent)
        logger.debug("Loaded %d tags sections from %s", len(files), path)
        return cls(project_name=project_name, path=path, mtime=stat.st_mtime, files=tuple(files))

    def matching(self, regex: re.Pattern[str]) -> list[str]:
        """Indexed files whose base name matches *regex*, sorted ascending."""
        return sorted(f for f in self.files if regex.search(posixpath.basename(f)))


class TagsTableCache:
    """Holds at most one loaded tags table.

    Loading a table for another project evicts the resident one.  A table
    whose file changed on disk since it was read is reloaded.
    """

    def __init__(self) -> None:
        self._table: TagsTable | None = None

    @property
    def loaded(self) -> TagsTable | None:
        return self._table

    def get(self, project_name: str, path: Path, base_dir: Path | None = None) -> TagsTable:
        table = self._table
        if table is not None and table.project_name == project_name and table.path == path:
            try:
                if path.stat().st_mtime == table.mtime:
                    return table
            except OSError:
                pass
            logger.debug("Tags file %s changed on disk, reloading", path)
        elif table is not None:
            logger.debug("Evicting tags table of '%s'", table.project_name)
        self._table = TagsTable.read(project_name, path, base_dir)
        return self._table

    def discard(self, project_name: str | None = None) -> None:
        """Drop the resident table (only if it belongs to *project_name*, when given)."""
        if self._table is None:
            return
        if project_name is None or self._table.project_name == project_name:
            self._table = None
