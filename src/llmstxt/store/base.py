"""Interface every snapshot store implements."""

from __future__ import annotations

from typing import List, Protocol, Sequence, runtime_checkable

from llmstxt.errors import StoreError
from llmstxt.models import PageRecord, Snapshot

__all__ = ["SnapshotStore", "check_unique_urls"]


@runtime_checkable
class SnapshotStore(Protocol):
    """Durable home for snapshots and their pages."""

    def latest_snapshot(self, base_url: str) -> Snapshot | None:
        """Return the most recently created snapshot for ``base_url``."""

    def pages_of_snapshot(self, snapshot_id: int) -> List[PageRecord]:
        """Return the pages stored with ``snapshot_id`` in their original order."""

    def save(self, snapshot: Snapshot, pages: Sequence[PageRecord]) -> Snapshot:
        """Persist ``snapshot`` and ``pages`` atomically, returning the stored snapshot."""

    def delete_by_base_url(self, base_url: str) -> None:
        """Remove every snapshot and page for ``base_url``."""

    def all_base_urls(self) -> List[str]:
        """Return every base URL with at least one snapshot."""


def check_unique_urls(pages: Sequence[PageRecord]) -> None:
    """Raise :class:`StoreError` if two pages share a URL."""

    seen: set[str] = set()
    for page in pages:
        if page.url in seen:
            raise StoreError(f"Duplicate page URL in snapshot: {page.url}")
        seen.add(page.url)
