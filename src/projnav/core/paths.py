"""Path normalization helpers shared by the registry, resolver and builder.

Paths may be plain local paths (``/home/me/app``) or remote-qualified in the
``/method:host:/local/path`` form (``/ssh:me@box:/srv/app``).  Remote paths
are never touched on disk: only their local part is normalized, and
:func:`to_local` strips the qualifier so the path can be embedded in a
command that runs on the remote side.
"""

from __future__ import annotations

import os
import posixpath
import re

_REMOTE_RE = re.compile(r"^(/[A-Za-z][\w-]*:[^/:]*:)(.*)$")


def split_remote(path: str) -> tuple[str, str]:
    """Return ``(prefix, local)``; *prefix* is empty for local paths."""
    match = _REMOTE_RE.match(path)
    if match is None:
        return "", path
    return match.group(1), match.group(2) or "/"


def is_remote(path: str) -> bool:
    return bool(split_remote(path)[0])


def to_local(path: str) -> str:
    """Translate a remote-qualified path to its remote-local form."""
    return split_remote(path)[1]


def _strip_trailing_sep(path: str, sep: str) -> str:
    if len(path) > 1 and path.endswith(sep):
        return path.rstrip(sep) or sep
    return path


def normalize(path: str) -> str:
    """Canonical absolute form without a trailing separator."""
    prefix, local = split_remote(str(path))
    if prefix:
        return prefix + _strip_trailing_sep(posixpath.normpath(local), "/")
    local = os.path.realpath(os.path.expanduser(local))
    return _strip_trailing_sep(local, os.sep)


def parent(path: str) -> str | None:
    """Drop the last segment of a normalized path, or None when exhausted."""
    prefix, local = split_remote(path)
    module = posixpath if prefix else os.path
    head = module.dirname(local)
    if head == local:
        return None
    return prefix + head
