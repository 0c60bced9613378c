"""Object storage operations for S3-compatible services."""

from .backend import (
    ListedItem,
    ObjectAttributes,
    ObjectBackend,
    S3ObjectBackend,
    translate_error,
)
from .clients import S3ClientConfig, S3ClientManager
from .listing import DirectoryLister
from .rename import ObjectRenamer

__all__ = [
    "DirectoryLister",
    "ListedItem",
    "ObjectAttributes",
    "ObjectBackend",
    "ObjectRenamer",
    "S3ClientConfig",
    "S3ClientManager",
    "S3ObjectBackend",
    "translate_error",
]
