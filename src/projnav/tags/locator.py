"""FileLocator — find project files by pattern using whatever index exists."""

from __future__ import annotations

import logging
import re
import shlex
import subprocess
from collections.abc import Callable
from pathlib import Path

from projnav.core.config import ProjnavConfig
from projnav.core.errors import InvalidPatternError
from projnav.core.project import ProjectRecord
from projnav.tags.classifier import IndexKind, active_tags_file, classify
from projnav.tags.table import TagsTableCache
from projnav.tags.walker import relative_files

logger = logging.getLogger(__name__)

_QUERY_TIMEOUT = 30


def compile_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidPatternError(pattern, str(e)) from e


class FileLocator:
    """Match file base names against a regex within one project.

    Results from the tags table and from the filesystem walk are sorted
    ascending so incremental displays stay stable between keystrokes.
    Results from the alternate index tool are passed through verbatim as a
    single element.
    """

    def __init__(self, config: ProjnavConfig, cache: TagsTableCache | None = None) -> None:
        self._config = config
        self._cache = cache or TagsTableCache()
        self._handlers: dict[IndexKind, Callable[[ProjectRecord, str, re.Pattern[str]], list[str]]] = {
            IndexKind.EXPLICIT: self._find_in_tags,
            IndexKind.ALTERNATE: self._find_with_query_tool,
            IndexKind.NONE: self._find_by_walk,
        }

    @property
    def cache(self) -> TagsTableCache:
        return self._cache

    def find_files(self, project: ProjectRecord, pattern: str) -> list[str]:
        """Return files of *project* matching *pattern*.

        Raises ``InvalidPatternError`` if *pattern* is not a valid regex.
        """
        regex = compile_pattern(pattern)
        kind = classify(project, self._config.index)
        logger.debug("Finding %r in '%s' via %s index", pattern, project.name, kind.value)
        return self._handlers[kind](project, pattern, regex)

    # ── Handlers ──────────────────────────────────────────────────────────────

    def _find_in_tags(self, project: ProjectRecord, pattern: str, regex: re.Pattern[str]) -> list[str]:
        tags_file = active_tags_file(project, self._config.index)
        if tags_file is None:
            # deleted between classification and lookup
            return self._find_by_walk(project, pattern, regex)
        table = self._cache.get(project.name, tags_file, base_dir=Path(project.root_dir))
        return table.matching(regex)

    def _find_with_query_tool(
        self, project: ProjectRecord, pattern: str, regex: re.Pattern[str]
    ) -> list[str]:
        command = self._config.index.query_command.replace("{pattern}", shlex.quote(pattern))
        try:
            result = subprocess.run(
                shlex.split(command),
                cwd=project.root_dir,
                capture_output=True,
                text=True,
                timeout=_QUERY_TIMEOUT,
            )
        except FileNotFoundError:
            logger.warning("Index query tool not found: %s", command)
            return []
        except subprocess.TimeoutExpired:
            logger.warning("Index query timed out after %ds: %s", _QUERY_TIMEOUT, command)
            return []
        if result.returncode != 0:
            logger.debug("Index query exited %d: %s", result.returncode, result.stderr.strip())
        return [result.stdout]

    def _find_by_walk(self, project: ProjectRecord, pattern: str, regex: re.Pattern[str]) -> list[str]:
        return relative_files(Path(project.root_dir), self._config.walk.exclude_dirs, regex)
