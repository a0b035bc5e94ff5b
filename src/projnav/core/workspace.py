"""Workspace — wires registry, resolver and the tags components together."""

from __future__ import annotations

from pathlib import Path

from projnav.core.config import ProjnavConfig, load_config
from projnav.core.project import ProjectRecord
from projnav.core.registry import ProjectRegistry
from projnav.core.resolver import Resolver
from projnav.core.session import NavigationSession
from projnav.tags.builder import IndexBuilder, RebuildResult
from projnav.tags.classifier import IndexKind, classify
from projnav.tags.locator import FileLocator
from projnav.tags.table import TagsTableCache


class Workspace:
    """Entry point for callers (CLI, editors, servers).

    One workspace shares a registry and a single loaded tags table between
    any number of navigation sessions.
    """

    def __init__(
        self,
        config: ProjnavConfig | None = None,
        registry: ProjectRegistry | None = None,
    ) -> None:
        self.config = config or load_config()
        self.registry = registry or ProjectRegistry.load(self.config.registry.registry_file())
        self.resolver = Resolver(self.registry, self.config.navigation.history_size)
        self.tags_cache = TagsTableCache()
        self.locator = FileLocator(self.config, self.tags_cache)
        self.builder = IndexBuilder(self.config, self.tags_cache)

    def new_session(self) -> NavigationSession:
        return self.resolver.new_session()

    def project_for(
        self,
        name: str | None = None,
        directory: str | Path | None = None,
        session: NavigationSession | None = None,
    ) -> ProjectRecord | None:
        """Pick a project by name, else by directory, else the session's current one."""
        if name is not None:
            return self.registry.find_by_name(name)
        return self.resolver.resolve(session, directory)

    def classify(self, project: ProjectRecord) -> IndexKind:
        return classify(project, self.config.index)

    def find_files(self, project: ProjectRecord, pattern: str) -> list[str]:
        return self.locator.find_files(project, pattern)

    async def rebuild(self, project: ProjectRecord) -> RebuildResult:
        return await self.builder.rebuild(project)

    def rebuild_sync(self, project: ProjectRecord) -> RebuildResult:
        return self.builder.rebuild_sync(project)
