"""Pruned filesystem walk used when a project has no usable index."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


def _log_walk_error(exc: OSError) -> None:
    logger.debug("Skipping unreadable directory %s: %s", exc.filename, exc)


def walk_files(root: Path, exclude_dirs: Iterable[str] = ()) -> Iterator[Path]:
    """Yield every file under *root*.

    Directories whose base name is in *exclude_dirs* are pruned before
    descending into them.
    """
    excluded = frozenset(exclude_dirs)
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for filename in filenames:
            yield Path(dirpath) / filename


def relative_files(
    root: Path,
    exclude_dirs: Iterable[str] = (),
    regex: re.Pattern[str] | None = None,
) -> list[str]:
    """Root-relative POSIX paths of files under *root*, sorted ascending.

    When *regex* is given only files whose base name matches are kept.
    """
    result: list[str] = []
    for path in walk_files(root, exclude_dirs):
        if regex is not None and not regex.search(path.name):
            continue
        result.append(path.relative_to(root).as_posix())
    result.sort()
    return result
