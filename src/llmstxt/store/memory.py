"""Process-local snapshot store."""

from __future__ import annotations

import itertools
import threading
from typing import Dict, List, Sequence

from llmstxt.models import PageRecord, Snapshot
from llmstxt.store.base import check_unique_urls

__all__ = ["InMemorySnapshotStore"]


class InMemorySnapshotStore:
    """Keep snapshots in dictionaries guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._snapshots: Dict[int, Snapshot] = {}
        self._pages: Dict[int, List[PageRecord]] = {}

    def latest_snapshot(self, base_url: str) -> Snapshot | None:
        with self._lock:
            matches = [s for s in self._snapshots.values() if s.base_url == base_url]
        if not matches:
            return None
        return max(matches, key=lambda s: (s.created_at, s.id)).model_copy()

    def pages_of_snapshot(self, snapshot_id: int) -> List[PageRecord]:
        with self._lock:
            return [page.model_copy() for page in self._pages.get(snapshot_id, [])]

    def save(self, snapshot: Snapshot, pages: Sequence[PageRecord]) -> Snapshot:
        check_unique_urls(pages)
        with self._lock:
            stored = snapshot.model_copy(update={"id": next(self._ids)})
            self._pages[stored.id] = [
                page.model_copy(update={"snapshot_id": stored.id}) for page in pages
            ]
            self._snapshots[stored.id] = stored
        return stored.model_copy()

    def delete_by_base_url(self, base_url: str) -> None:
        with self._lock:
            doomed = [sid for sid, s in self._snapshots.items() if s.base_url == base_url]
            for sid in doomed:
                del self._snapshots[sid]
                self._pages.pop(sid, None)

    def all_base_urls(self) -> List[str]:
        with self._lock:
            return list(dict.fromkeys(s.base_url for s in self._snapshots.values()))
