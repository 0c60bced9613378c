"""Object key helpers.

Object storage has a flat keyspace; directories only exist as shared,
delimited key prefixes ('/' unless configured otherwise). These helpers
build and take apart such keys the way ``path.join`` would for POSIX paths,
splitting on whichever separator the bucket uses.
"""

from objstore.core.exceptions import ValidationError

SEPARATOR = "/"


def _check_separator(separator: str) -> None:
    if not separator:
        raise ValidationError("Key separator must not be empty")


def join_key(*parts: str, separator: str = SEPARATOR) -> str:
    """Join key segments into a clean object key.

    Empty segments are ignored, duplicate separators collapse, ``.`` and
    ``..`` are resolved, and leading/trailing separators are dropped.

    Args:
        *parts: Key segments, each of which may itself contain separators
        separator: Separator between directory levels

    Returns:
        The joined key, or an empty string for the bucket root

    Raises:
        ValidationError: If ``..`` segments climb above the root
    """
    _check_separator(separator)

    segments: list[str] = []
    for part in parts:
        for segment in part.split(separator):
            if segment in ("", "."):
                continue
            if segment == "..":
                if not segments:
                    joined = separator.join(filter(None, parts))
                    raise ValidationError(f"Key escapes the bucket root: {joined!r}")
                segments.pop()
            else:
                segments.append(segment)
    return separator.join(segments)


def directory_prefix(*parts: str, separator: str = SEPARATOR) -> str:
    """Join segments into a listing prefix that ends in a separator.

    The empty prefix stays empty so that it still means the bucket root.
    """
    key = join_key(*parts, separator=separator)
    if key:
        key += separator
    return key


def split_key(path: str, separator: str = SEPARATOR) -> tuple[str, str]:
    """Split a relative path into its parent prefix and final name.

    >>> split_key("docs/reports/q1.pdf")
    ('docs/reports', 'q1.pdf')
    >>> split_key("a.txt")
    ('', 'a.txt')
    """
    key = join_key(path, separator=separator)
    if not key:
        raise ValidationError(f"Path has no object name: {path!r}")
    prefix, _, name = key.rpartition(separator)
    return prefix, name


def relative_name(key: str, prefix: str) -> str:
    """Strip ``prefix`` from ``key`` if the key starts with it."""
    if prefix and key.startswith(prefix):
        return key[len(prefix) :]
    return key
