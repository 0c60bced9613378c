"""Directory-style operations on one bucket under a base prefix.

ObjectStore binds a single backend handle to a base prefix and exposes the
listing, rename and upload operations with paths relative to that prefix.
Build it once at startup (``ObjectStore.from_settings`` or ``open_store``),
share it between callers, and close it at shutdown.
"""

from typing import BinaryIO, Iterator, Optional, Union

from objstore.core import get_logger
from objstore.core.config import Settings, settings as default_settings
from objstore.core.exceptions import ValidationError
from objstore.objectstorage.backend import (
    ObjectAttributes,
    ObjectBackend,
    S3ObjectBackend,
)
from objstore.objectstorage.clients import S3ClientConfig, S3ClientManager
from objstore.objectstorage.listing import DirectoryLister
from objstore.objectstorage.rename import ObjectRenamer
from objstore.path import directory_prefix, join_key
from objstore.schemas import ObjectEntry, Page

logger = get_logger(__name__)


class ObjectStore:
    """Facade over an object backend rooted at ``base_prefix``."""

    def __init__(
        self,
        backend: ObjectBackend,
        base_prefix: str = "",
        delimiter: str = "/",
    ):
        self.backend = backend
        self.delimiter = delimiter
        self.base_prefix = join_key(base_prefix, separator=delimiter)
        self.lister = DirectoryLister(backend, self.base_prefix, delimiter)
        self.renamer = ObjectRenamer(backend, self.base_prefix, delimiter)
        logger.info("Object store initialized", base_prefix=self.base_prefix)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ObjectStore":
        """Build a store and its S3 client from application settings."""
        settings = settings or default_settings
        if not settings.bucket_name:
            raise ValidationError("OBJSTORE_BUCKET_NAME is not configured")

        client_manager = S3ClientManager(S3ClientConfig.from_settings(settings))
        return cls(
            S3ObjectBackend(client_manager, settings.bucket_name),
            base_prefix=settings.base_prefix,
            delimiter=settings.delimiter,
        )

    def __enter__(self) -> "ObjectStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the backend connection pool."""
        self.backend.close()

    def object_key(self, *parts: str) -> str:
        """Full backend key for a path relative to the base prefix."""
        return join_key(self.base_prefix, *parts, separator=self.delimiter)

    def upload_file(
        self, body: Union[bytes, BinaryIO], prefix: str, filename: str
    ) -> int:
        """Upload ``body`` as ``prefix/filename`` and return the bytes written."""
        if not join_key(filename, separator=self.delimiter):
            raise ValidationError("filename must not be empty")
        key = self.object_key(prefix, filename)
        written = self.backend.put(key, body)
        logger.info("File uploaded", key=key, size=written)
        return written

    def create_directory(self, prefix: str, dir_name: str) -> str:
        """Create ``prefix/dir_name/`` by writing an empty placeholder object.

        Object storage has no directories. The placeholder keeps an empty
        directory visible in listings of its parent and is itself never
        listed as a child of the directory.
        """
        if not join_key(dir_name, separator=self.delimiter):
            raise ValidationError("dir_name must not be empty")
        marker = directory_prefix(
            self.base_prefix, prefix, dir_name, separator=self.delimiter
        )
        self.backend.put(marker, b"")
        logger.info("Directory created", key=marker)
        return marker

    def list_page(
        self,
        prefix: str = "",
        start_after: str = "",
        limit: Optional[int] = None,
    ) -> Page:
        """List one page of the children of ``prefix``. See DirectoryLister."""
        return self.lister.list_page(prefix, start_after, limit)

    def iter_entries(
        self, prefix: str = "", page_size: Optional[int] = None
    ) -> Iterator[ObjectEntry]:
        """Yield every child of ``prefix`` across all pages."""
        return self.lister.iter_entries(prefix, page_size)

    def rename_object(
        self,
        source_prefix: str,
        source_name: str,
        destination_prefix: str,
        destination_name: str,
    ) -> str:
        """Rename an object within the base prefix. See ObjectRenamer."""
        return self.renamer.rename(
            source_prefix, source_name, destination_prefix, destination_name
        )

    def get_attributes(self, prefix: str, name: str) -> ObjectAttributes:
        return self.backend.get_attributes(self.object_key(prefix, name))

    def read_object(self, prefix: str, name: str) -> bytes:
        return self.backend.get(self.object_key(prefix, name))

    def delete_object(self, prefix: str, name: str) -> None:
        key = self.object_key(prefix, name)
        self.backend.delete(key)
        logger.info("Object deleted", key=key)


def open_store(
    bucket_name: str,
    base_prefix: str = "",
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
    region_name: str = "us-east-1",
    endpoint_url: Optional[str] = None,
    aws_profile: Optional[str] = None,
) -> ObjectStore:
    """Convenience function to build an S3-backed store.

    Args:
        bucket_name: Bucket holding the objects
        base_prefix: Prefix all paths are rooted under
        access_key_id: AWS access key ID
        secret_access_key: AWS secret access key
        session_token: AWS session token for temporary credentials
        region_name: AWS region name
        endpoint_url: Custom S3 endpoint URL
        aws_profile: AWS CLI profile name

    Returns:
        ObjectStore owning a freshly created client
    """
    config = S3ClientConfig(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token,
        region_name=region_name,
        endpoint_url=endpoint_url,
        aws_profile=aws_profile,
        connect_timeout=default_settings.connect_timeout,
        read_timeout=default_settings.read_timeout,
        max_attempts=default_settings.max_attempts,
    )
    backend = S3ObjectBackend(S3ClientManager(config), bucket_name)
    return ObjectStore(backend, base_prefix, default_settings.delimiter)
