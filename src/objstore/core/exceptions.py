"""Exception hierarchy for objstore."""

from typing import Optional


class ObjStoreError(Exception):
    """Base exception for all objstore errors."""

    pass


class ValidationError(ObjStoreError):
    """Raised when validation fails."""

    pass


class BackendError(ObjStoreError):
    """Raised when the object backend rejects a request."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class BackendUnavailableError(BackendError):
    """Raised on transport, authentication or server-side failures."""

    pass


class ObjectNotFoundError(BackendError):
    """Raised when a key does not resolve to an object."""

    pass


class ObjectExistsError(BackendError):
    """Raised when a destination-must-not-exist precondition fails."""

    pass


class IterationError(ObjStoreError):
    """Raised when a listing fails part way; the partial page is discarded."""

    pass


class RenameError(ObjStoreError):
    """Base class for rename failures.

    Attributes:
        source_key: Full key of the object being renamed
        destination_key: Full key it was being renamed to
        requires_cleanup: True when duplicate objects were left behind and an
            operator has to remove one of them
    """

    requires_cleanup = False

    def __init__(self, message: str, source_key: str, destination_key: str):
        super().__init__(message)
        self.source_key = source_key
        self.destination_key = destination_key


class CopyFailedError(RenameError):
    """Raised when the copy step fails. The source is untouched."""

    pass


class PreconditionFailedError(CopyFailedError):
    """Raised when the rename destination already exists."""

    pass


class DeleteAfterCopyFailedError(RenameError):
    """Raised when the source could not be deleted after a successful copy.

    Raised as-is, the copied destination was removed again and only the
    source remains. The CompensationFailedError subclass means the copy
    could not be removed either.
    """

    pass


class CompensationFailedError(DeleteAfterCopyFailedError):
    """Raised when neither the source nor the copied destination could be deleted.

    Both keys now hold the same content. This state is not retried.
    """

    requires_cleanup = True

    def __init__(
        self,
        message: str,
        source_key: str,
        destination_key: str,
        delete_error: Exception,
        compensation_error: Exception,
    ):
        super().__init__(message, source_key, destination_key)
        self.delete_error = delete_error
        self.compensation_error = compensation_error
