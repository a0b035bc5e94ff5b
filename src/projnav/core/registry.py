"""Project registry: an ordered collection of project records.

The whole registry is the unit of persistence.  It is stored as a single
JSON list of 5-element entries::

    [["app", "/r/app", "src", null, null], ...]

and every mutating call rewrites that file.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from projnav.core import paths
from projnav.core.errors import RegistryLoadError
from projnav.core.project import ProjectRecord

logger = logging.getLogger(__name__)


class ProjectRegistry:
    """In-memory list of projects mirrored 1:1 to a storage file.

    Insertion order is the canonical order.  When several projects share
    the same root directory, the first-registered one wins directory
    lookups.
    """

    def __init__(
        self,
        projects: list[ProjectRecord] | None = None,
        storage_path: Path | None = None,
    ) -> None:
        self._projects: list[ProjectRecord] = list(projects or [])
        self._storage_path = storage_path
        self._lock = threading.Lock()

    # ── Persistence ──────────────────────────────────────────────────────────

    @classmethod
    def load(cls, path: Path) -> ProjectRegistry:
        """Read a registry file; a missing file yields an empty registry.

        Raises ``RegistryLoadError`` if the file exists but is malformed.
        """
        if not path.exists():
            logger.debug("No registry at %s, starting empty", path)
            return cls(storage_path=path)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise RegistryLoadError(path, str(e)) from e
        except json.JSONDecodeError as e:
            raise RegistryLoadError(path, f"invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise RegistryLoadError(path, "top-level value must be a list")

        projects: list[ProjectRecord] = []
        for i, entry in enumerate(data):
            try:
                projects.append(ProjectRecord.from_tuple(entry))
            except ValueError as e:
                raise RegistryLoadError(path, f"entry {i}: {e}") from e

        logger.debug("Loaded %d projects from %s", len(projects), path)
        return cls(projects, storage_path=path)

    def save(self) -> bool:
        """Write the registry to its storage path.

        Returns False (after logging a warning) if writing fails.  A registry
        without a storage path is purely in-memory and always succeeds.
        """
        if self._storage_path is None:
            return True
        with self._lock:
            payload = [p.to_tuple() for p in self._projects]
        try:
            self._storage_path.parent.mkdir(parents=True, exist_ok=True)
            self._storage_path.write_text(
                json.dumps(payload, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning("Failed to save project registry to %s: %s", self._storage_path, e)
            return False
        return True

    @property
    def storage_path(self) -> Path | None:
        return self._storage_path

    # ── Queries ──────────────────────────────────────────────────────────────

    def projects(self) -> list[ProjectRecord]:
        """All projects in registry order."""
        with self._lock:
            return list(self._projects)

    def sorted_for_display(self) -> list[ProjectRecord]:
        return sorted(self.projects(), key=lambda p: p.name)

    def names(self) -> list[str]:
        return [p.name for p in self.projects()]

    def find_by_name(self, name: str) -> ProjectRecord | None:
        with self._lock:
            for project in self._projects:
                if project.name == name:
                    return project
        return None

    def find_by_directory(self, directory: str) -> ProjectRecord | None:
        """Closest registered ancestor of *directory* (inclusive).

        Roots are compared by exact string equality after normalization,
        walking up one segment at a time.  Returns None if no ancestor is a
        registered root.
        """
        roots: dict[str, ProjectRecord] = {}
        for project in self.projects():
            # setdefault keeps the first-registered project per root
            roots.setdefault(paths.normalize(project.root_dir), project)

        current: str | None = paths.normalize(directory)
        while current is not None:
            project = roots.get(current)
            if project is not None:
                return project
            current = paths.parent(current)
        return None

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find_by_name(name) is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjectRegistry):
            return NotImplemented
        return self.projects() == other.projects()

    # ── Mutation ─────────────────────────────────────────────────────────────

    def insert(self, record: ProjectRecord, replace: bool = False) -> bool:
        """Append *record*.

        If a project with the same name exists it is left untouched unless
        *replace* is set, in which case the old record is removed and the
        new one appended.  Returns True when the registry changed.
        """
        with self._lock:
            existing = next(
                (i for i, p in enumerate(self._projects) if p.name == record.name), None
            )
            if existing is not None:
                if not replace:
                    logger.debug("Project '%s' already registered, not replacing", record.name)
                    return False
                del self._projects[existing]
            self._projects.append(record)
        logger.info("Registered project '%s' at %s", record.name, record.root_dir)
        self.save()
        return True

    def delete(self, name: str) -> bool:
        """Remove the first project named *name*; absent names are ignored."""
        with self._lock:
            for i, project in enumerate(self._projects):
                if project.name == name:
                    del self._projects[i]
                    break
            else:
                return False
        logger.info("Removed project '%s'", name)
        self.save()
        return True
