"""Data types exchanged with the Linkding API."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Bookmark:
    """A bookmark stored in Linkding."""

    id: int
    url: str = ""
    title: str = ""


@dataclass(frozen=True)
class Asset:
    """A file attached to a bookmark."""

    id: int
    asset_type: str = ""
    content_type: str = ""
    display_name: str = ""


@dataclass(frozen=True)
class BookmarksQuery:
    """Filters for listing bookmarks; empty values mean no filter."""

    tag: str = ""
    bundle_id: int = 0
    modified_since: Optional[datetime] = None