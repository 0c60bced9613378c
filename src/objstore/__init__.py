"""Directory-style listing and renaming on top of S3-compatible object storage.

Object storage keeps a flat keyspace. This package presents a prefix of it
as a directory: cursor-paged listings of immediate children, directories
derived from common key prefixes, and rename implemented as a conditional
copy followed by a delete.

Key Features:
    - Paged, delimiter-aware directory listings with opaque key cursors
    - Rename with a destination-must-not-exist precondition and cleanup
      of the copy when the source cannot be deleted
    - One shared S3 client per process
    - CLI interface

Recommended Usage:
    >>> from objstore import open_store
    >>> with open_store("my-bucket", base_prefix="projects") as store:
    ...     page = store.list_page("reports", limit=50)
    ...     for entry in page.entries:
    ...         print(entry.name, entry.is_dir, entry.size)
    ...     if page.has_more:
    ...         page = store.list_page("reports", page.last_key, limit=50)

Advanced Usage:
    Compose the pieces around any ObjectBackend implementation:

    >>> from objstore.objectstorage import DirectoryLister, ObjectRenamer
"""

__version__ = "0.1.0"

from .core.exceptions import (
    BackendError,
    BackendUnavailableError,
    CompensationFailedError,
    CopyFailedError,
    DeleteAfterCopyFailedError,
    IterationError,
    ObjectExistsError,
    ObjectNotFoundError,
    ObjStoreError,
    PreconditionFailedError,
    RenameError,
    ValidationError,
)
from .objectstorage import (
    DirectoryLister,
    ObjectAttributes,
    ObjectBackend,
    ObjectRenamer,
    S3ClientConfig,
    S3ObjectBackend,
)
from .schemas import ObjectEntry, Page
from .store import ObjectStore, open_store

__all__ = [
    # Facade
    "ObjectStore",
    "open_store",
    # Values
    "ObjectEntry",
    "Page",
    "ObjectAttributes",
    # Components
    "DirectoryLister",
    "ObjectRenamer",
    "ObjectBackend",
    "S3ObjectBackend",
    "S3ClientConfig",
    # Errors
    "ObjStoreError",
    "ValidationError",
    "BackendError",
    "BackendUnavailableError",
    "ObjectNotFoundError",
    "ObjectExistsError",
    "IterationError",
    "RenameError",
    "CopyFailedError",
    "PreconditionFailedError",
    "DeleteAfterCopyFailedError",
    "CompensationFailedError",
]
