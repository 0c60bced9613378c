"""Value types returned by directory listings."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ObjectEntry(BaseModel):
    """One immediate child of a listed prefix.

    Directories are synthetic: they are common key prefixes reported by the
    backend, so they carry no size and no timestamps.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Name relative to the listed prefix")
    is_dir: bool = Field(False, description="True for a common prefix")
    size: int = Field(0, description="Object size in bytes, 0 for directories")
    created: Optional[datetime] = Field(None, description="Creation time")
    updated: Optional[datetime] = Field(None, description="Last modification time")


class Page(BaseModel):
    """One page of a directory listing.

    ``last_key`` is the full backend key of the last entry. Pass it back as
    ``start_after`` to fetch the next page; it stays valid when earlier keys
    are deleted in between because listing resumes strictly after it.
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[ObjectEntry, ...] = ()
    last_key: str = ""
    has_more: bool = False
