"""Resolver — directory-to-project matching and project navigation.

Navigation state lives in a :class:`NavigationSession` passed to every call,
so one resolver (and one registry) can serve several sessions:

  switch_to()   — make a project current and record it in history
  toggle()      — flip between the two most recent projects
  last()        — jump to the anchor, or cycle round-robin through history
  anchor()      — pin a project for last(); reset_anchor() clears it
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from projnav.core.errors import ProjectNotFoundError
from projnav.core.project import ProjectRecord
from projnav.core.registry import ProjectRegistry
from projnav.core.session import NavigationSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwitchResult:
    """Outcome of a navigation call, handed to the display layer."""

    project: ProjectRecord
    other_window: bool = False

    @property
    def landing_path(self) -> str:
        return self.project.landing_path()

    @property
    def open_as_file(self) -> bool:
        return bool(self.project.load_as_file)


class Resolver:
    """Resolve directories and names to projects and track navigation."""

    def __init__(self, registry: ProjectRegistry, history_size: int = 16) -> None:
        self._registry = registry
        self._history_size = history_size

    @property
    def registry(self) -> ProjectRegistry:
        return self._registry

    def new_session(self) -> NavigationSession:
        return NavigationSession(history_size=self._history_size)

    # ── Lookup ────────────────────────────────────────────────────────────────

    def find_by_name(self, name: str) -> ProjectRecord | None:
        return self._registry.find_by_name(name)

    def find_by_directory(self, directory: str | os.PathLike[str]) -> ProjectRecord | None:
        project = self._registry.find_by_directory(os.fspath(directory))
        if project is None:
            logger.debug("No project contains %s", directory)
        return project

    def current(self, session: NavigationSession) -> ProjectRecord | None:
        if session.current_project_name is None:
            return None
        return self._registry.find_by_name(session.current_project_name)

    def resolve(
        self,
        session: NavigationSession | None = None,
        directory: str | os.PathLike[str] | None = None,
    ) -> ProjectRecord | None:
        """Project for *directory*, falling back to the session's current one.

        An explicit *directory* wins; without one the current project is
        used, and failing that the process working directory is resolved.
        """
        if directory is not None:
            return self.find_by_directory(directory)
        if session is not None:
            project = self.current(session)
            if project is not None:
                return project
        return self.find_by_directory(os.getcwd())

    def _require(self, name: str) -> ProjectRecord:
        project = self._registry.find_by_name(name)
        if project is None:
            raise ProjectNotFoundError(name)
        return project

    # ── Navigation ────────────────────────────────────────────────────────────

    def switch_to(
        self,
        session: NavigationSession,
        name: str,
        other_window: bool = False,
    ) -> SwitchResult:
        """Make *name* the current project and push it onto history.

        Raises ``ProjectNotFoundError`` for unknown names.
        """
        project = self._require(name)
        session.current_project_name = name
        # push() is a no-op (and keeps history_index) when name is the head
        session.push(name)
        logger.debug("Switched to project '%s'", name)
        return SwitchResult(project=project, other_window=other_window)

    def toggle(self, session: NavigationSession, other_window: bool = False) -> SwitchResult | None:
        """Flip to the previously visited project."""
        history = session.history
        if not history:
            return None
        if session.current_project_name == history[0]:
            if len(history) < 2:
                return None
            target = history[1]
        else:
            target = history[0]
        return self.switch_to(session, target, other_window)

    def last(self, session: NavigationSession, other_window: bool = False) -> SwitchResult | None:
        """Go to the anchored project, or the next one in history.

        Repeated calls without an anchor cycle through history round-robin;
        the cycle does not reorder history.
        """
        if session.anchored_project_name is not None:
            return self.switch_to(session, session.anchored_project_name, other_window)
        if not session.history:
            return None
        session.history_index = (session.history_index + 1) % len(session.history)
        name = session.history[session.history_index]
        project = self._require(name)
        session.current_project_name = name
        logger.debug("Cycled to project '%s' (history %d)", name, session.history_index)
        return SwitchResult(project=project, other_window=other_window)

    def anchor(self, session: NavigationSession, name: str) -> ProjectRecord:
        project = self._require(name)
        session.anchored_project_name = name
        logger.info("Anchored project '%s'", name)
        return project

    def reset_anchor(self, session: NavigationSession) -> None:
        session.anchored_project_name = None

    def delete_project(self, name: str, *sessions: NavigationSession) -> bool:
        """Unregister *name* and drop it from the given sessions' state."""
        removed = self._registry.delete(name)
        for session in sessions:
            session.forget(name)
        return removed
