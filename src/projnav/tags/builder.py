"""IndexBuilder — regenerate a project's tags file.

The enumeration command is chosen from markers found at the project root
(version control first, then build descriptors, then a plain ``find``) and
piped into the external indexing tool.  The tool runs as an asyncio
subprocess with its output captured in a per-project log.  Once it exits,
a missing or empty tags file is replaced by a manually synthesized one so
file lookup always has an index to work with.

A rebuild requested while a previous rebuild of the same project is still
running terminates the earlier subprocess first; the superseded run then
returns without touching the tags file.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import shlex
import shutil
import signal
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from projnav.core import paths
from projnav.core.config import ProjnavConfig
from projnav.core.project import ProjectRecord
from projnav.tags.table import TagsTableCache, write_manual_tags
from projnav.tags.walker import relative_files

logger = logging.getLogger(__name__)


def _find_suffixes(*suffixes: str, prune: str | None = None) -> str:
    names = " -o ".join(f"-name '*{s}'" for s in suffixes)
    if prune:
        return f"find . -name {prune} -prune -o -type f \\( {names} \\) -print"
    return f"find . -type f \\( {names} \\)"


@dataclass(frozen=True)
class EnumerationRule:
    """Marker file or directory at the root, and how to list the project's files."""

    marker: str
    command: str
    kind: str  # "vcs" or "build"


# Ordered: the first marker present wins, so VCS rules come first.
ENUMERATION_RULES: tuple[EnumerationRule, ...] = (
    EnumerationRule(".git", "git ls-files", "vcs"),
    EnumerationRule(".hg", "hg files", "vcs"),
    EnumerationRule(".svn", "svn list -R | grep -v '/$'", "vcs"),
    EnumerationRule(".bzr", "bzr ls -R --versioned --kind=file", "vcs"),
    EnumerationRule("_darcs", "darcs show files --no-directories", "vcs"),
    EnumerationRule("go.mod", _find_suffixes(".go", prune="vendor"), "build"),
    EnumerationRule("Cargo.toml", _find_suffixes(".rs", prune="target"), "build"),
    EnumerationRule(
        "package.json",
        _find_suffixes(".js", ".jsx", ".ts", ".tsx", ".mjs", prune="node_modules"),
        "build",
    ),
    EnumerationRule("pom.xml", _find_suffixes(".java", prune="target"), "build"),
    EnumerationRule("build.gradle", _find_suffixes(".java", ".kt", prune="build"), "build"),
    EnumerationRule("pyproject.toml", _find_suffixes(".py", prune=".venv"), "build"),
    EnumerationRule("setup.py", _find_suffixes(".py", prune=".venv"), "build"),
    EnumerationRule("CMakeLists.txt", _find_suffixes(".c", ".cc", ".cpp", ".h", ".hpp"), "build"),
    EnumerationRule("Makefile", _find_suffixes(".c", ".cc", ".cpp", ".h", ".hpp"), "build"),
)


def fallback_enumeration(exclude_dirs: Iterable[str] = ()) -> str:
    """Generic ``find`` listing every file, pruning the excluded directories."""
    names = " -o ".join(f"-name {shlex.quote(d)}" for d in exclude_dirs)
    if not names:
        return "find . -type f"
    return f"find . -type d \\( {names} \\) -prune -o -type f -print"


_UNSAFE_NAME_RE = re.compile(r"[^\w.-]+")


@dataclass(frozen=True)
class RebuildResult:
    """Summary returned after a rebuild."""

    project_name: str
    tags_path: str
    command: str
    log_path: Path
    exit_code: int | None     # None when the process was killed on timeout
    synthesized: bool = False
    entries: int | None = None  # manual entry count, when synthesized
    superseded: bool = False    # a newer rebuild of the same project took over


@dataclass
class _RunningRebuild:
    """Slot claimed in ``IndexBuilder._running`` before the subprocess exists."""

    process: asyncio.subprocess.Process | None = None
    superseded: bool = False
    finished: asyncio.Event = field(default_factory=asyncio.Event)


class IndexBuilder:
    """Spawn the external indexer and fall back to a manual tags file.

    Parameters
    ----------
    config:
        Loaded configuration; the ``index`` and ``walk`` sections are used.
    cache:
        Shared loaded-table cache.  Whatever table it holds is discarded
        before each rebuild.
    """

    def __init__(self, config: ProjnavConfig, cache: TagsTableCache | None = None) -> None:
        self._config = config
        self._cache = cache or TagsTableCache()
        self._running: dict[str, _RunningRebuild] = {}

    # ── Command composition ───────────────────────────────────────────────────

    @staticmethod
    def select_rule(root: Path) -> EnumerationRule | None:
        for rule in ENUMERATION_RULES:
            if (root / rule.marker).exists():
                return rule
        return None

    def enumeration_command(self, project: ProjectRecord) -> str:
        rule = None if paths.is_remote(project.root_dir) else self.select_rule(Path(project.root_dir))
        if rule is None:
            logger.debug("No project marker in %s, using generic enumeration", project.root_dir)
            return fallback_enumeration(self._config.walk.exclude_dirs)
        logger.debug("Marker %s found in %s", rule.marker, project.root_dir)
        return rule.command

    def tags_path(self, project: ProjectRecord) -> str:
        return project.tags_file(self._config.index.tags_filename)

    def indexing_command(self, project: ProjectRecord) -> str:
        """Full shell command: enumerate files and pipe them into the indexer.

        Remote-qualified paths are embedded in their remote-local form.
        """
        root = paths.to_local(project.root_dir)
        tags = paths.to_local(self.tags_path(project))
        tool = self._config.index.index_command.replace("{tags}", shlex.quote(tags))
        return f"cd {shlex.quote(root)} && {self.enumeration_command(project)} | {tool}"

    def log_path(self, project: ProjectRecord) -> Path:
        safe = _UNSAFE_NAME_RE.sub("_", project.name)
        return self._config.index.log_dir() / f"tags-{safe}.log"

    # ── Rebuild ───────────────────────────────────────────────────────────────

    async def rebuild(self, project: ProjectRecord) -> RebuildResult:
        """Regenerate *project*'s tags file.

        A nonzero exit of the external tool is logged, not raised; only an
        empty or missing tags file triggers manual synthesis.
        """
        # claim the slot before the first await so a concurrent request sees it
        run = _RunningRebuild()
        previous = self._running.get(project.name)
        self._running[project.name] = run
        try:
            return await self._run(project, run, previous)
        finally:
            if run.process is not None and run.process.returncode is None:
                _signal_group(run.process, signal.SIGTERM)
            if self._running.get(project.name) is run:
                del self._running[project.name]
            run.finished.set()

    async def _run(
        self, project: ProjectRecord, run: _RunningRebuild, previous: _RunningRebuild | None
    ) -> RebuildResult:
        self._cache.discard()
        if previous is not None:
            await self._supersede(project.name, previous)

        command = self.indexing_command(project)
        tags_path = self.tags_path(project)
        log_path = self.log_path(project)
        superseded = RebuildResult(
            project_name=project.name, tags_path=tags_path, command=command,
            log_path=log_path, exit_code=None, superseded=True,
        )
        if run.superseded:
            logger.info("Tags rebuild for '%s' superseded before it started", project.name)
            return superseded

        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.unlink(missing_ok=True)
        self._warn_if_tool_missing()

        logger.info("Rebuilding tags for '%s': %s", project.name, command)
        timeout = self._config.index.rebuild_timeout
        with open(log_path, "wb") as log:
            log.write(f"$ {command}\n".encode("utf-8"))
            log.flush()
            process = await asyncio.create_subprocess_shell(
                command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=log,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True,
            )
            run.process = process
            if run.superseded:
                # a newer request arrived while the process was starting
                _signal_group(process, signal.SIGTERM)
            try:
                exit_code: int | None = await asyncio.wait_for(process.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Tags rebuild for '%s' timed out after %.0fs, killing it",
                    project.name, timeout,
                )
                _signal_group(process, signal.SIGKILL)
                await process.wait()
                exit_code = None

        if run.superseded:
            logger.info("Tags rebuild for '%s' superseded by a newer request", project.name)
            return superseded

        if exit_code:
            logger.info(
                "Indexer for '%s' exited with status %d (see %s)",
                project.name, exit_code, log_path,
            )

        if paths.is_remote(tags_path):
            return RebuildResult(
                project_name=project.name, tags_path=tags_path, command=command,
                log_path=log_path, exit_code=exit_code,
            )

        tags_file = Path(tags_path)
        if tags_file.is_file() and tags_file.stat().st_size > 0:
            return RebuildResult(
                project_name=project.name, tags_path=tags_path, command=command,
                log_path=log_path, exit_code=exit_code,
            )

        logger.info("Indexer produced no output for '%s', writing tags manually", project.name)
        entries = self.synthesize(project)
        return RebuildResult(
            project_name=project.name, tags_path=tags_path, command=command,
            log_path=log_path, exit_code=exit_code, synthesized=True, entries=entries,
        )

    def rebuild_sync(self, project: ProjectRecord) -> RebuildResult:
        """Blocking wrapper around :meth:`rebuild`."""
        return asyncio.run(self.rebuild(project))

    def is_running(self, project_name: str) -> bool:
        return project_name in self._running

    def synthesize(self, project: ProjectRecord) -> int:
        """Write a tags file listing every file under the project root.

        Entries are root-relative when the tags file lives in the root and
        absolute otherwise.  Returns the number of entries written.
        """
        root = Path(project.root_dir)
        tags_file = Path(self.tags_path(project))
        files = relative_files(root, self._config.walk.exclude_dirs)
        if tags_file.parent.resolve() == root.resolve():
            names = [f for f in files if f != tags_file.name]
        else:
            names = [(root / f).as_posix() for f in files]
        count = write_manual_tags(tags_file, names)
        logger.info("Wrote %d manual tags entries to %s", count, tags_file)
        return count

    # ── Internal helpers ──────────────────────────────────────────────────────

    async def _supersede(self, project_name: str, previous: _RunningRebuild) -> None:
        """Stop an earlier rebuild of the same project and wait for it to finish."""
        previous.superseded = True
        process = previous.process
        if process is not None and process.returncode is None:
            logger.info(
                "Terminating previous tags rebuild for '%s' (pid %d)", project_name, process.pid
            )
            _signal_group(process, signal.SIGTERM)
        await previous.finished.wait()

    def _warn_if_tool_missing(self) -> None:
        try:
            argv = shlex.split(self._config.index.index_command)
        except ValueError:
            argv = []
        if argv and shutil.which(argv[0]) is None:
            logger.warning(
                "Indexing tool '%s' not found on PATH; tags will be written manually", argv[0]
            )


def _signal_group(process: asyncio.subprocess.Process, sig: signal.Signals) -> None:
    """Signal the whole pipeline started for *process*."""
    try:
        if hasattr(os, "killpg"):
            os.killpg(process.pid, sig)
        else:
            process.send_signal(sig)
    except ProcessLookupError:
        logger.debug("Process %d already exited", process.pid)
