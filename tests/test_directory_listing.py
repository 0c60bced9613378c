"""Tests for paged directory listings."""

import pytest

from objstore.core.exceptions import (
    BackendUnavailableError,
    IterationError,
    ValidationError,
)
from objstore.objectstorage.backend import ListedItem
from objstore.objectstorage.listing import DirectoryLister


def _names(page):
    return [entry.name for entry in page.entries]


class TestListPage:
    """Test single-page listings."""

    def test_files_and_directories(self, memory_backend):
        """Test a file and a created directory at the root."""
        memory_backend.put("a.txt", b"hello")
        memory_backend.put("sub/", b"")

        page = DirectoryLister(memory_backend).list_page("", "", limit=10)

        assert len(page.entries) == 2
        file_entry, dir_entry = page.entries
        assert file_entry.name == "a.txt"
        assert file_entry.is_dir is False
        assert file_entry.size == 5
        assert file_entry.created is not None
        assert dir_entry.name == "sub"
        assert dir_entry.is_dir is True
        assert dir_entry.size == 0
        assert dir_entry.created is None
        assert dir_entry.updated is None
        assert page.has_more is False

    def test_cursor_resumes_after_last_key(self, memory_backend):
        """Test limit=1 then resuming from the returned cursor."""
        for name in ("a", "b", "c"):
            memory_backend.put(f"data/{name}", name.encode())
        lister = DirectoryLister(memory_backend)

        first = lister.list_page("data", "", limit=1)
        assert _names(first) == ["a"]
        assert first.last_key == "data/a"
        assert first.has_more is True

        rest = lister.list_page("data", first.last_key, limit=10)
        assert _names(rest) == ["b", "c"]
        assert rest.last_key == "data/c"
        assert rest.has_more is False

    def test_empty_prefix(self, memory_backend):
        """Test a prefix with no children."""
        page = DirectoryLister(memory_backend).list_page("nothing-here", limit=10)

        assert page.entries == ()
        assert page.last_key == ""
        assert page.has_more is False

    def test_directory_marker_not_listed(self, memory_backend):
        """Test the listed directory's own placeholder never appears."""
        memory_backend.put("docs/", b"")
        memory_backend.put("docs/readme.md", b"# docs")

        page = DirectoryLister(memory_backend).list_page("docs", limit=10)

        assert _names(page) == ["readme.md"]

    def test_empty_directory_lists_nothing(self, memory_backend):
        memory_backend.put("docs/", b"")

        page = DirectoryLister(memory_backend).list_page("docs", limit=10)

        assert page.entries == ()
        assert page.has_more is False

    def test_directory_names_have_no_trailing_separator(self, memory_backend):
        memory_backend.put("data/2023/file1.txt", b"1")
        memory_backend.put("data/2024/deep/file2.txt", b"2")

        page = DirectoryLister(memory_backend).list_page("data", limit=10)

        assert _names(page) == ["2023", "2024"]
        assert all(entry.is_dir for entry in page.entries)
        assert page.last_key == "data/2024/"

    def test_entries_interleave_in_key_order(self, memory_backend):
        """Test files and directories share one ordered namespace."""
        memory_backend.put("p/b.txt", b"b")
        memory_backend.put("p/a/x.txt", b"x")
        memory_backend.put("p/c/y.txt", b"y")
        memory_backend.put("p/a.txt", b"a")

        page = DirectoryLister(memory_backend).list_page("p", limit=10)

        assert _names(page) == ["a.txt", "a", "b.txt", "c"]
        assert [e.is_dir for e in page.entries] == [False, True, False, True]

    def test_base_prefix_is_stripped(self, memory_backend):
        memory_backend.put("tenant/docs/a.txt", b"a")
        memory_backend.put("other/docs/b.txt", b"b")

        lister = DirectoryLister(memory_backend, base_prefix="tenant")
        page = lister.list_page("docs", limit=10)

        assert _names(page) == ["a.txt"]
        assert page.last_key == "tenant/docs/a.txt"

    def test_exact_fit_reports_no_more(self, memory_backend):
        """Test a page that exactly exhausts the prefix has has_more=False."""
        for name in ("a", "b"):
            memory_backend.put(f"data/{name}", b"")

        page = DirectoryLister(memory_backend).list_page("data", limit=2)

        assert _names(page) == ["a", "b"]
        assert page.has_more is False

    def test_requests_one_item_beyond_limit(self, memory_backend):
        memory_backend.put("data/a", b"")

        DirectoryLister(memory_backend).list_page("data", limit=5)

        assert memory_backend.iterate_calls == [
            {"prefix": "data/", "start_after": "", "page_size": 6}
        ]

    def test_cursor_survives_deleted_entries(self, memory_backend):
        """Test deleting already-listed keys does not shift the next page."""
        for name in ("a", "b", "c", "d"):
            memory_backend.put(f"data/{name}", b"")
        lister = DirectoryLister(memory_backend)

        first = lister.list_page("data", limit=2)
        memory_backend.delete("data/a")
        memory_backend.delete("data/b")
        second = lister.list_page("data", first.last_key, limit=2)

        assert _names(second) == ["c", "d"]
        assert second.has_more is False

    def test_repeated_cursor_prefix_not_duplicated(self):
        """Test a backend re-reporting the cursor's common prefix is filtered."""

        class RegroupingBackend:
            def iterate(self, prefix, delimiter, start_after="", page_size=None):
                yield ListedItem(key="data/sub/", is_prefix=True)
                yield ListedItem(key="data/z.txt", size=1)

        page = DirectoryLister(RegroupingBackend()).list_page(
            "data", "data/sub/", limit=10
        )

        assert _names(page) == ["z.txt"]


class TestCustomDelimiter:
    """Test listings in buckets that use another directory separator."""

    def test_lists_children(self, memory_backend):
        memory_backend.put("data|a", b"a")
        memory_backend.put("data|sub|x", b"x")
        memory_backend.put("data/not-a-dir", b"y")

        page = DirectoryLister(memory_backend, delimiter="|").list_page(
            "data", limit=10
        )

        assert _names(page) == ["a", "sub"]
        assert [e.is_dir for e in page.entries] == [False, True]
        assert page.last_key == "data|sub|"
        assert memory_backend.iterate_calls[0]["prefix"] == "data|"

    def test_base_prefix_and_cursor(self, memory_backend):
        for name in ("a", "b", "c"):
            memory_backend.put(f"tenant|docs|{name}", b"")
        lister = DirectoryLister(memory_backend, base_prefix="tenant", delimiter="|")

        first = lister.list_page("docs", limit=2)
        rest = lister.list_page("docs", first.last_key, limit=2)

        assert _names(first) == ["a", "b"]
        assert first.has_more is True
        assert _names(rest) == ["c"]
        assert rest.has_more is False


class TestListPageValidation:
    """Test argument validation."""

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit(self, memory_backend, limit):
        with pytest.raises(ValidationError, match="limit must be positive"):
            DirectoryLister(memory_backend).list_page("data", limit=limit)

    def test_empty_delimiter_rejected(self, memory_backend):
        with pytest.raises(ValidationError, match="delimiter"):
            DirectoryLister(memory_backend, delimiter="")

    def test_cursor_from_other_prefix(self, memory_backend):
        with pytest.raises(ValidationError, match="does not belong"):
            DirectoryLister(memory_backend).list_page(
                "data", "elsewhere/a.txt", limit=10
            )

    def test_default_limit_from_settings(self, memory_backend, monkeypatch):
        monkeypatch.setattr(
            "objstore.objectstorage.listing.directory_page.settings.default_page_size",
            2,
        )
        for name in ("a", "b", "c"):
            memory_backend.put(name, b"")

        page = DirectoryLister(memory_backend).list_page()

        assert _names(page) == ["a", "b"]
        assert page.has_more is True


class TestListPageErrors:
    """Test backend failures during a listing."""

    def test_iteration_error_discards_partial_page(self, memory_backend):
        for name in ("a", "b", "c"):
            memory_backend.put(f"data/{name}", b"")
        memory_backend.fail_iteration_after = 1

        with pytest.raises(IterationError, match="listing interrupted") as exc_info:
            DirectoryLister(memory_backend).list_page("data", limit=10)

        assert exc_info.value.__cause__ is memory_backend.iteration_error

    def test_unavailable_backend_surfaces_unmodified(self, memory_backend):
        memory_backend.put("data/a", b"")
        memory_backend.fail_iteration_after = 0
        memory_backend.iteration_error = BackendUnavailableError("connection reset")

        with pytest.raises(BackendUnavailableError, match="connection reset"):
            DirectoryLister(memory_backend).list_page("data", limit=10)


class TestPagination:
    """Test chaining cursors across pages."""

    @pytest.mark.parametrize("limit", [1, 2, 3, 7, 50])
    def test_every_child_exactly_once(self, memory_backend, limit):
        """Test a full scan yields all children once, in order."""
        expected = []
        for i in range(7):
            memory_backend.put(f"root/file{i}.txt", b"x" * i)
            expected.append(f"file{i}.txt")
        for i in range(5):
            memory_backend.put(f"root/dir{i}/nested/obj", b"")
            memory_backend.put(f"root/dir{i}/other", b"")
            expected.append(f"dir{i}")
        memory_backend.put("root/", b"")
        memory_backend.put("rootless.txt", b"")
        lister = DirectoryLister(memory_backend)

        seen = []
        start_after = ""
        while True:
            page = lister.list_page("root", start_after, limit=limit)
            assert len(page.entries) <= limit
            seen.extend(_names(page))
            if not page.has_more:
                break
            assert len(page.entries) == limit
            start_after = page.last_key

        assert seen == sorted(expected)

    def test_iter_entries_walks_all_pages(self, memory_backend):
        for name in ("a", "b", "c", "d", "e"):
            memory_backend.put(f"data/{name}", b"")

        entries = list(
            DirectoryLister(memory_backend).iter_entries("data", page_size=2)
        )

        assert [entry.name for entry in entries] == ["a", "b", "c", "d", "e"]
        assert len(memory_backend.iterate_calls) == 3
