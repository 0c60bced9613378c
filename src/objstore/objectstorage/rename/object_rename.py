"""Rename objects by copy-then-delete.

Object storage has no rename primitive. A rename is a conditional copy to
the new key followed by a delete of the old one. The two requests are not
atomic together: between the copy and the delete both keys hold the same
content, and if the delete and the cleanup of the copy both fail, both keys
stay behind. That last state is reported as CompensationFailedError and is
never retried here.
"""

from typing import Optional

from objstore.core import get_logger, get_tracer
from objstore.core.exceptions import (
    BackendError,
    BackendUnavailableError,
    CompensationFailedError,
    CopyFailedError,
    DeleteAfterCopyFailedError,
    ObjectExistsError,
    PreconditionFailedError,
    ValidationError,
)
from objstore.objectstorage.backend import ObjectBackend
from objstore.path import join_key

logger = get_logger(__name__)
tracer = get_tracer(__name__)


class ObjectRenamer:
    """Moves single objects to new keys under a base prefix."""

    def __init__(
        self, backend: ObjectBackend, base_prefix: str = "", delimiter: str = "/"
    ):
        self.backend = backend
        self.base_prefix = base_prefix
        self.delimiter = delimiter

    def rename(
        self,
        source_prefix: str,
        source_name: str,
        destination_prefix: str,
        destination_name: str,
        destination_base_prefix: Optional[str] = None,
    ) -> str:
        """Rename an object to a new name, possibly under another prefix.

        Both paths are relative to the base prefix; the destination may be
        rooted elsewhere with ``destination_base_prefix``.

        Returns:
            The full destination key

        Raises:
            PreconditionFailedError: If the destination already exists
            CopyFailedError: If the copy fails for any other reason
            BackendUnavailableError: If the copy fails on a transport or
                authentication error; nothing was written and the rename can
                be retried
            DeleteAfterCopyFailedError: If the source could not be deleted;
                the copy was cleaned up again
            CompensationFailedError: If the source could not be deleted and
                neither could the copy; both objects now exist
        """
        if destination_base_prefix is None:
            destination_base_prefix = self.base_prefix

        source_key = join_key(
            self.base_prefix, source_prefix, source_name, separator=self.delimiter
        )
        destination_key = join_key(
            destination_base_prefix,
            destination_prefix,
            destination_name,
            separator=self.delimiter,
        )
        return self.rename_keys(source_key, destination_key)

    def rename_keys(self, source_key: str, destination_key: str) -> str:
        """Rename the object at ``source_key`` to ``destination_key`` (full keys)."""
        if not source_key or not destination_key:
            raise ValidationError("Source and destination keys must not be empty")
        if source_key == destination_key:
            raise ValidationError(f"Source and destination are the same: {source_key}")

        log = logger.bind(source=source_key, destination=destination_key)

        with tracer.start_as_current_span("objstore.rename") as span:
            span.set_attribute("objstore.source", source_key)
            span.set_attribute("objstore.destination", destination_key)

            try:
                self.backend.copy_if_absent(source_key, destination_key)
            except ObjectExistsError as e:
                log.warning("Rename destination already exists")
                raise PreconditionFailedError(
                    f"Failed to copy object from {source_key} to {destination_key}: "
                    f"destination already exists",
                    source_key,
                    destination_key,
                ) from e
            except BackendUnavailableError:
                log.error("Rename copy failed, backend unavailable")
                raise
            except BackendError as e:
                log.error("Rename copy failed", error=str(e))
                raise CopyFailedError(
                    f"Failed to copy object from {source_key} to "
                    f"{destination_key}: {e}",
                    source_key,
                    destination_key,
                ) from e

            try:
                self.backend.delete(source_key)
            except BackendError as delete_error:
                span.set_attribute("objstore.compensated", True)
                self._compensate(source_key, destination_key, delete_error)

        log.info("Object renamed")
        return destination_key

    def _compensate(
        self, source_key: str, destination_key: str, delete_error: BackendError
    ) -> None:
        """Remove the copy after the source delete failed, then raise."""
        log = logger.bind(source=source_key, destination=destination_key)
        log.warning("Source delete failed after copy", error=str(delete_error))

        try:
            self.backend.delete(destination_key)
        except BackendError as cleanup_error:
            log.error(
                "Cleanup of copied object failed, both objects remain",
                delete_error=str(delete_error),
                cleanup_error=str(cleanup_error),
            )
            raise CompensationFailedError(
                f"Failed to delete source object {source_key} and failed to "
                f"clean up destination object {destination_key}: original error: "
                f"{delete_error}, cleanup error: {cleanup_error}",
                source_key,
                destination_key,
                delete_error=delete_error,
                compensation_error=cleanup_error,
            ) from cleanup_error

        raise DeleteAfterCopyFailedError(
            f"Failed to delete source object {source_key} after copying: "
            f"{delete_error}",
            source_key,
            destination_key,
        ) from delete_error
