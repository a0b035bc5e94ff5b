"""Tags index lifecycle — classification, rebuild and file lookup."""

from projnav.tags.builder import IndexBuilder, RebuildResult
from projnav.tags.classifier import IndexKind, active_tags_file, classify
from projnav.tags.locator import FileLocator
from projnav.tags.table import TagsTable, TagsTableCache

__all__ = [
    "FileLocator",
    "IndexBuilder",
    "IndexKind",
    "RebuildResult",
    "TagsTable",
    "TagsTableCache",
    "active_tags_file",
    "classify",
]
