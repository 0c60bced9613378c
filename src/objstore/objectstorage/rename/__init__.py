"""Object rename operations."""

from .object_rename import ObjectRenamer

__all__ = ["ObjectRenamer"]
