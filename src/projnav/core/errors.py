"""Exception types raised by projnav."""

from __future__ import annotations

from pathlib import Path


class ProjnavError(Exception):
    """Base class for all projnav errors."""


class RegistryLoadError(ProjnavError):
    """The persisted registry file exists but cannot be read back."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot load project registry {self.path}: {reason}")


class ProjectNotFoundError(ProjnavError):
    """A project name was required but is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No project named '{name}'")


class DuplicateProjectError(ProjnavError):
    """A project with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Project '{name}' is already registered")


class InvalidPatternError(ProjnavError):
    """A file lookup pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
