"""Cursor-paged directory listings over a flat object keyspace."""

from typing import Iterator, Optional

from objstore.core import get_logger, get_tracer, settings
from objstore.core.exceptions import (
    BackendError,
    BackendUnavailableError,
    IterationError,
    ValidationError,
)
from objstore.objectstorage.backend import ListedItem, ObjectBackend
from objstore.path import directory_prefix, relative_name
from objstore.schemas import ObjectEntry, Page

logger = get_logger(__name__)
tracer = get_tracer(__name__)


class DirectoryLister:
    """Presents the immediate children of a prefix as pages of entries.

    The backend groups everything below the next delimiter into a single
    common prefix, which is reported as a directory entry. Files and
    directories share one lexicographically ordered namespace.

    Pages are resumed with the full key of the previous page's last entry,
    not an offset, so a multi-page scan stays correct while other callers
    add or remove keys.
    """

    def __init__(
        self,
        backend: ObjectBackend,
        base_prefix: str = "",
        delimiter: str = "/",
    ):
        """Initialize directory lister.

        Args:
            backend: Shared object backend handle
            base_prefix: Prefix every listed path is rooted under
            delimiter: Key separator used to group common prefixes
        """
        if not delimiter:
            raise ValidationError("delimiter must not be empty")
        self.backend = backend
        self.base_prefix = base_prefix
        self.delimiter = delimiter

    def list_page(
        self,
        prefix: str = "",
        start_after: str = "",
        limit: Optional[int] = None,
    ) -> Page:
        """List one page of the immediate children of ``prefix``.

        Args:
            prefix: Directory path relative to the base prefix
            start_after: Empty for the first page, otherwise the ``last_key``
                of the previous page
            limit: Maximum number of entries in the page

        Returns:
            Page of entries in key order, the cursor for the next call, and
            whether more entries follow

        Raises:
            ValidationError: If ``limit`` is not positive or the cursor does
                not belong to this prefix
            IterationError: If the backend fails during the listing
            BackendUnavailableError: On transport or authentication failures
        """
        if limit is None:
            limit = settings.default_page_size
        if limit <= 0:
            raise ValidationError(f"limit must be positive, got: {limit}")

        full_prefix = directory_prefix(
            self.base_prefix, prefix, separator=self.delimiter
        )
        if start_after and not start_after.startswith(full_prefix):
            raise ValidationError(
                f"Cursor {start_after!r} does not belong to prefix {full_prefix!r}"
            )

        logger.debug(
            "Listing directory page",
            prefix=full_prefix,
            start_after=start_after,
            limit=limit,
        )

        with tracer.start_as_current_span("objstore.list_page") as span:
            span.set_attribute("objstore.prefix", full_prefix)
            span.set_attribute("objstore.limit", limit)

            entries: list[ObjectEntry] = []
            last_key = ""
            has_more = False

            # Ask for one more than the page so the look-ahead usually needs
            # no extra request
            items = self.backend.iterate(
                full_prefix, self.delimiter, start_after, page_size=limit + 1
            )
            try:
                for item in items:
                    if start_after and item.key <= start_after:
                        continue

                    entry = self._to_entry(item, full_prefix)
                    if entry is None:
                        continue

                    if len(entries) >= limit:
                        has_more = True
                        break

                    entries.append(entry)
                    last_key = item.key
            except BackendUnavailableError:
                raise
            except BackendError as e:
                logger.error(
                    "Directory listing failed", prefix=full_prefix, error=str(e)
                )
                raise IterationError(
                    f"Error iterating objects under '{full_prefix}': {e}"
                ) from e
            finally:
                close = getattr(items, "close", None)
                if close is not None:
                    close()

            span.set_attribute("objstore.count", len(entries))
            span.set_attribute("objstore.has_more", has_more)

        logger.info(
            "Directory page listed",
            prefix=full_prefix,
            count=len(entries),
            has_more=has_more,
        )
        return Page(entries=tuple(entries), last_key=last_key, has_more=has_more)

    def iter_entries(
        self, prefix: str = "", page_size: Optional[int] = None
    ) -> Iterator[ObjectEntry]:
        """Yield every immediate child of ``prefix``, fetching page by page."""
        start_after = ""
        while True:
            page = self.list_page(prefix, start_after, page_size)
            yield from page.entries
            if not page.has_more:
                return
            start_after = page.last_key

    def _to_entry(self, item: ListedItem, full_prefix: str) -> Optional[ObjectEntry]:
        """Convert a raw listing item, or return None for the prefix itself."""
        name = relative_name(item.key, full_prefix)

        if item.is_prefix:
            if name.endswith(self.delimiter):
                name = name[: -len(self.delimiter)]
            if not name:
                return None
            return ObjectEntry(name=name, is_dir=True)

        # The directory's own placeholder object
        if not name:
            return None
        return ObjectEntry(
            name=name,
            is_dir=False,
            size=item.size,
            created=item.created,
            updated=item.updated,
        )
