"""Object key construction helpers."""

from .keys import SEPARATOR, directory_prefix, join_key, relative_name, split_key

__all__ = [
    "SEPARATOR",
    "directory_prefix",
    "join_key",
    "relative_name",
    "split_key",
]
