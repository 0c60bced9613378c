"""The object backend contract and its S3 implementation.

Everything above this module (listing, renaming, the store facade) talks to
an ``ObjectBackend``. ``S3ObjectBackend`` is the production implementation;
tests substitute an in-memory one.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Iterator, Optional, Protocol, Union

from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError

from objstore.core import get_logger
from objstore.core.exceptions import (
    BackendError,
    BackendUnavailableError,
    ObjectExistsError,
    ObjectNotFoundError,
)
from objstore.objectstorage.clients import S3ClientManager

logger = get_logger(__name__)

UPLOAD_CHUNK_SIZE = 16 * 1024 * 1024

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}
_PRECONDITION_CODES = {"PreconditionFailed", "412", "ConditionalRequestConflict"}
_UNAVAILABLE_CODES = {
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "InvalidToken",
    "RequestTimeout",
    "SlowDown",
    "ServiceUnavailable",
    "InternalError",
    "NoSuchBucket",
}


@dataclass(frozen=True)
class ListedItem:
    """A raw listing result: an object or a common prefix.

    Attributes:
        key: Full object key, or the full common prefix including its
            trailing delimiter
        is_prefix: True when the backend grouped keys into this prefix
        size: Object size in bytes (0 for prefixes)
        created: Creation time, None for prefixes
        updated: Last modification time, None for prefixes
    """

    key: str
    is_prefix: bool = False
    size: int = 0
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


@dataclass(frozen=True)
class ObjectAttributes:
    """Metadata of a single stored object."""

    key: str
    size: int
    created: Optional[datetime]
    updated: Optional[datetime]
    etag: Optional[str] = None
    content_type: Optional[str] = None


class ObjectBackend(Protocol):
    """Capabilities the listing and rename logic need from object storage."""

    def put(self, key: str, body: Union[bytes, BinaryIO]) -> int:
        """Create or overwrite an object and return the bytes written."""
        ...

    def get(self, key: str) -> bytes:
        """Return an object's content."""
        ...

    def delete(self, key: str) -> None:
        """Delete an object; raise ObjectNotFoundError if it is absent."""
        ...

    def get_attributes(self, key: str) -> ObjectAttributes:
        """Return an object's size and timestamps."""
        ...

    def copy_if_absent(self, source_key: str, destination_key: str) -> None:
        """Copy an object, failing with ObjectExistsError if the destination exists."""
        ...

    def iterate(
        self,
        prefix: str,
        delimiter: str,
        start_after: str = "",
        page_size: Optional[int] = None,
    ) -> Iterator[ListedItem]:
        """Lazily yield objects and common prefixes under ``prefix`` in key order."""
        ...

    def close(self) -> None:
        """Release the backend's connections."""
        ...


def translate_error(exc: Exception, key: Optional[str] = None) -> BackendError:
    """Map a botocore exception onto the objstore error hierarchy."""
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = str(error.get("Code", ""))
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
        message = f"{code or status}: {error.get('Message', exc)}"

        if code in _UNAVAILABLE_CODES:
            return BackendUnavailableError(message, key=key)
        if code in _NOT_FOUND_CODES or status == 404:
            return ObjectNotFoundError(f"Object not found: {key}", key=key)
        if code in _PRECONDITION_CODES or status == 412:
            return ObjectExistsError(f"Object already exists: {key}", key=key)
        if status in (401, 403) or status >= 500:
            return BackendUnavailableError(message, key=key)
        return BackendError(message, key=key)

    if isinstance(exc, BotoCoreError):
        return BackendUnavailableError(str(exc), key=key)

    return BackendError(str(exc), key=key)


class S3ObjectBackend:
    """ObjectBackend over one S3 bucket.

    The client manager is shared: construct it once and pass it in. Closing
    the backend closes the shared client.
    """

    def __init__(self, client_manager: S3ClientManager, bucket_name: str):
        self.client_manager = client_manager
        self.bucket_name = bucket_name
        logger.info("S3 object backend initialized", bucket=bucket_name)

    @property
    def client(self):
        return self.client_manager.client

    def put(self, key: str, body: Union[bytes, BinaryIO]) -> int:
        """Upload ``body`` to ``key``.

        Bytes are sent in a single request. File objects are streamed through
        the managed transfer, split into 16 MiB parts when large.
        """
        try:
            if isinstance(body, (bytes, bytearray)):
                self.client.put_object(Bucket=self.bucket_name, Key=key, Body=body)
                written = len(body)
            else:
                self.client.upload_fileobj(
                    body,
                    self.bucket_name,
                    key,
                    Config=TransferConfig(
                        multipart_threshold=UPLOAD_CHUNK_SIZE,
                        multipart_chunksize=UPLOAD_CHUNK_SIZE,
                    ),
                )
                written = self._head(key)["ContentLength"]
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, key) from e

        logger.debug("Object written", key=key, size=written)
        return written

    def get(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, key) from e

    def delete(self, key: str) -> None:
        """Delete ``key``.

        S3 acknowledges deletes of missing keys, so existence is checked
        first to report ObjectNotFoundError.
        """
        try:
            self._head(key)
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, key) from e
        logger.debug("Object deleted", key=key)

    def get_attributes(self, key: str) -> ObjectAttributes:
        try:
            head = self._head(key)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, key) from e

        # S3 keeps no creation time; an object is immutable once written
        modified = head.get("LastModified")
        return ObjectAttributes(
            key=key,
            size=head.get("ContentLength", 0),
            created=modified,
            updated=modified,
            etag=head.get("ETag"),
            content_type=head.get("ContentType"),
        )

    def copy_if_absent(self, source_key: str, destination_key: str) -> None:
        """Copy ``source_key`` to ``destination_key`` unless the destination exists.

        CopyObject has no destination-must-not-exist precondition, so the
        content is written with a conditional PutObject (``If-None-Match: *``)
        that S3 evaluates server-side. The whole object is held in memory.
        """
        try:
            source = self.client.get_object(Bucket=self.bucket_name, Key=source_key)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, source_key) from e

        extra = {}
        if source.get("ContentType"):
            extra["ContentType"] = source["ContentType"]
        if source.get("Metadata"):
            extra["Metadata"] = source["Metadata"]

        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=destination_key,
                Body=source["Body"].read(),
                IfNoneMatch="*",
                **extra,
            )
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, destination_key) from e

        logger.debug("Object copied", source=source_key, destination=destination_key)

    def iterate(
        self,
        prefix: str,
        delimiter: str,
        start_after: str = "",
        page_size: Optional[int] = None,
    ) -> Iterator[ListedItem]:
        """Yield objects and common prefixes under ``prefix`` in key order.

        Uses ListObjectsV2, whose StartAfter is an exclusive lower bound.
        Pages are fetched lazily, one request each, as the caller consumes
        the iterator.
        """
        kwargs = {"Bucket": self.bucket_name, "Prefix": prefix}
        if delimiter:
            kwargs["Delimiter"] = delimiter
        if start_after:
            kwargs["StartAfter"] = start_after

        pagination = {}
        if page_size:
            pagination["PageSize"] = page_size

        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(**kwargs, PaginationConfig=pagination):
                items = [
                    ListedItem(
                        key=obj["Key"],
                        size=obj.get("Size", 0),
                        created=obj.get("LastModified"),
                        updated=obj.get("LastModified"),
                    )
                    for obj in page.get("Contents", [])
                ]
                items.extend(
                    ListedItem(key=common["Prefix"], is_prefix=True)
                    for common in page.get("CommonPrefixes", [])
                )
                # A page reports objects and prefixes separately
                items.sort(key=lambda item: item.key)
                yield from items
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, prefix) from e

    def close(self) -> None:
        self.client_manager.close()

    def _head(self, key: str) -> dict:
        return self.client.head_object(Bucket=self.bucket_name, Key=key)
