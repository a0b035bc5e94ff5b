"""projnav - project registry, directory resolution and tags-table file lookup."""

__version__ = "0.3.0"
