"""Test configuration and fixtures for objstore."""

from datetime import datetime, timezone
from typing import Optional

import boto3
import pytest
from moto import mock_aws

from objstore.core.exceptions import (
    BackendError,
    ObjectExistsError,
    ObjectNotFoundError,
)
from objstore.objectstorage.backend import (
    ListedItem,
    ObjectAttributes,
    S3ObjectBackend,
)
from objstore.objectstorage.clients import S3ClientConfig, S3ClientManager

BUCKET = "test-bucket"
CREDENTIALS = {
    "access_key_id": "test_key",
    "secret_access_key": "test_secret",
    "region_name": "us-east-1",
}


class InMemoryBackend:
    """ObjectBackend over a dict, with failure injection for error paths.

    Attributes:
        objects: key -> content
        fail_delete: keys whose delete raises ``delete_error``
        fail_copy: when set, copy_if_absent raises it
        fail_iteration_after: raise ``iteration_error`` after yielding this
            many items from iterate()
    """

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.timestamps: dict[str, datetime] = {}
        self.fail_delete: set[str] = set()
        self.delete_error: BackendError = BackendError("delete refused")
        self.fail_copy: Optional[BackendError] = None
        self.fail_iteration_after: Optional[int] = None
        self.iteration_error: BackendError = BackendError("listing interrupted")
        self.iterate_calls: list[dict] = []
        self.closed = False

    def put(self, key, body):
        data = body if isinstance(body, bytes) else body.read()
        self.objects[key] = data
        self.timestamps[key] = datetime.now(timezone.utc)
        return len(data)

    def get(self, key):
        if key not in self.objects:
            raise ObjectNotFoundError(f"Object not found: {key}", key=key)
        return self.objects[key]

    def delete(self, key):
        if key in self.fail_delete:
            raise self.delete_error
        if key not in self.objects:
            raise ObjectNotFoundError(f"Object not found: {key}", key=key)
        del self.objects[key]
        del self.timestamps[key]

    def get_attributes(self, key):
        if key not in self.objects:
            raise ObjectNotFoundError(f"Object not found: {key}", key=key)
        return ObjectAttributes(
            key=key,
            size=len(self.objects[key]),
            created=self.timestamps[key],
            updated=self.timestamps[key],
        )

    def copy_if_absent(self, source_key, destination_key):
        if self.fail_copy is not None:
            raise self.fail_copy
        if source_key not in self.objects:
            raise ObjectNotFoundError(f"Object not found: {source_key}", key=source_key)
        if destination_key in self.objects:
            raise ObjectExistsError(
                f"Object already exists: {destination_key}", key=destination_key
            )
        self.put(destination_key, self.objects[source_key])

    def iterate(self, prefix, delimiter, start_after="", page_size=None):
        self.iterate_calls.append(
            {"prefix": prefix, "start_after": start_after, "page_size": page_size}
        )
        seen_prefixes = set()
        yielded = 0
        for key in sorted(self.objects):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix) :]
            if delimiter and delimiter in rest:
                common = prefix + rest[: rest.index(delimiter) + len(delimiter)]
                if common in seen_prefixes:
                    continue
                seen_prefixes.add(common)
                item = ListedItem(key=common, is_prefix=True)
            else:
                item = ListedItem(
                    key=key,
                    size=len(self.objects[key]),
                    created=self.timestamps[key],
                    updated=self.timestamps[key],
                )
            if start_after and item.key <= start_after:
                continue
            if (
                self.fail_iteration_after is not None
                and yielded >= self.fail_iteration_after
            ):
                raise self.iteration_error
            yielded += 1
            yield item

    def close(self):
        self.closed = True


@pytest.fixture
def memory_backend():
    """Empty in-memory object backend."""
    return InMemoryBackend()


@pytest.fixture
def aws_credentials(monkeypatch):
    """Dummy credentials so nothing can reach a real AWS account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def s3_client(aws_credentials):
    """Mocked S3 with an empty test bucket."""
    with mock_aws():
        client = boto3.client(
            "s3",
            aws_access_key_id="test_key",
            aws_secret_access_key="test_secret",
            region_name="us-east-1",
        )
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def s3_backend(s3_client):
    """S3ObjectBackend against the mocked test bucket."""
    backend = S3ObjectBackend(S3ClientManager(S3ClientConfig(**CREDENTIALS)), BUCKET)
    yield backend
    backend.close()
