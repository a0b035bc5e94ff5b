"""Per-session navigation state."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class NavigationSession:
    """Current project, anchor and visit history of one logical session.

    ``history`` is most-recent-first and never holds the same name twice.
    Independent sessions can share a single registry.
    """

    history_size: int = 16
    current_project_name: str | None = None
    anchored_project_name: str | None = None
    history: list[str] = field(default_factory=list)
    history_index: int = 0

    @property
    def last_visited(self) -> str | None:
        return self.history[0] if self.history else None

    def push(self, name: str) -> bool:
        """Record a visit.  Returns False if *name* is already the head."""
        if self.history and self.history[0] == name:
            return False
        self.history = [name] + [h for h in self.history if h != name]
        del self.history[self.history_size:]
        self.history_index = 0
        return True

    def forget(self, name: str) -> None:
        """Drop every reference to a project that no longer exists."""
        self.history = [h for h in self.history if h != name]
        if self.history_index >= len(self.history):
            self.history_index = 0
        if self.current_project_name == name:
            self.current_project_name = None
        if self.anchored_project_name == name:
            self.anchored_project_name = None
