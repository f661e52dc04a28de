"""Domain models used across the application."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, Field


class PageType(str, Enum):
    """Kind of resource recorded for a crawled URL."""

    PAGE = "PAGE"
    STATIC_ASSET = "STATIC_ASSET"


class PageInfo(BaseModel):
    """A page or asset discovered during a single crawl."""

    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    content_hash: str
    page_type: PageType = PageType.PAGE


class CrawlResult(BaseModel):
    """Pages discovered for ``base_url``, in discovery order."""

    base_url: str
    pages: List[PageInfo] = Field(default_factory=list)


class Snapshot(BaseModel):
    """Immutable record of one crawl outcome for one base URL."""

    id: Optional[int] = None
    base_url: str
    created_at: datetime = Field(default_factory=datetime.now)


class PageRecord(BaseModel):
    """A persisted page belonging to exactly one :class:`Snapshot`."""

    snapshot_id: Optional[int] = None
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    content_hash: str
    page_type: PageType = PageType.PAGE

    @classmethod
    def from_page_info(cls, page: PageInfo, snapshot_id: int | None = None) -> "PageRecord":
        return cls(snapshot_id=snapshot_id, **page.model_dump())


class DiffReport(BaseModel):
    """URLs added, removed and modified between two consecutive snapshots."""

    added: Set[str] = Field(default_factory=set)
    removed: Set[str] = Field(default_factory=set)
    modified: Set[str] = Field(default_factory=set)

    @property
    def total_changes(self) -> int:
        return len(self.added) + len(self.removed) + len(self.modified)

    def is_empty(self) -> bool:
        return self.total_changes == 0
