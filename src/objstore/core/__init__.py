"""Core utilities and shared components for objstore."""

from .config import Settings, settings
from .exceptions import ObjStoreError, ValidationError
from .observability import get_logger, get_tracer

__all__ = [
    "Settings",
    "settings",
    "ObjStoreError",
    "ValidationError",
    "get_logger",
    "get_tracer",
]
