"""Object storage listing operations."""

from .directory_page import DirectoryLister

__all__ = ["DirectoryLister"]
