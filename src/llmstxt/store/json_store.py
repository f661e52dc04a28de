"""Snapshot store backed by JSON files in the local blobstore."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Sequence
from urllib.parse import urlparse

from pydantic import ValidationError

from llmstxt.blobstore import resolve_blob_root
from llmstxt.errors import StoreError
from llmstxt.models import PageRecord, Snapshot
from llmstxt.store.base import check_unique_urls

__all__ = ["JsonSnapshotStore", "META_FILENAME", "SEQUENCE_FILENAME", "SNAPSHOTS_DIR"]

logger = logging.getLogger(__name__)

SNAPSHOTS_DIR = "snapshots"
#: Per-site file naming the base URL the directory belongs to.
META_FILENAME = "meta.json"
#: Root-level file holding the last snapshot id handed out.
SEQUENCE_FILENAME = "sequence.json"


def _site_dir(root: Path, base_url: str) -> Path:
    """Blob-style directory holding every snapshot of ``base_url``."""

    host = urlparse(base_url).netloc or "unknown"
    url_hash = hashlib.sha1(base_url.encode("utf-8")).hexdigest()
    return root / f"site={host}" / url_hash


def _snapshot_filename(snapshot_id: int) -> str:
    return f"{snapshot_id:010d}.json"


def _snapshot_files(directory: Path) -> List[Path]:
    """Snapshot files in ``directory``, oldest id first."""

    if not directory.is_dir():
        return []
    files = [path for path in directory.glob("*.json") if path.stem.isdigit()]
    return sorted(files, key=lambda path: int(path.stem))


def _write_json(target: Path, payload: dict) -> None:
    """Write ``payload`` to a temporary sibling and move it over ``target``."""

    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as file:
            json.dump(payload, file, ensure_ascii=False, indent=2)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class JsonSnapshotStore:
    """Persist each snapshot together with its pages as a single JSON document.

    Layout under the blob root::

        snapshots/sequence.json
        snapshots/site=<host>/<sha1(base_url)>/meta.json
        snapshots/site=<host>/<sha1(base_url)>/<id>.json

    Ids increase monotonically, so the newest snapshot of a site is the file
    with the highest id and only that file is read to find it. Every file is
    written to a temporary sibling and moved into place with
    :func:`os.replace`, so readers only ever see complete documents.
    """

    def __init__(self, blob_root: Path | str | None = None) -> None:
        self.root = resolve_blob_root(blob_root) / SNAPSHOTS_DIR
        self._lock = threading.Lock()
        self._last_id: int | None = None
        self._locations: Dict[int, Path] = {}

    def _load(self, path: Path) -> tuple[Snapshot, List[PageRecord]]:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            snapshot = Snapshot.model_validate(payload["snapshot"])
            pages = [PageRecord.model_validate(item) for item in payload.get("pages", [])]
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValidationError) as exc:
            raise StoreError(f"Failed to load snapshot from {path}: {exc}") from exc
        return snapshot, pages

    def _read_last_id(self) -> int:
        sequence = self.root / SEQUENCE_FILENAME
        try:
            return int(json.loads(sequence.read_text(encoding="utf-8"))["last_id"])
        except FileNotFoundError:
            pass
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring unreadable %s, rebuilding from snapshot files: %s", sequence, exc)
        ids = [int(path.stem) for path in self.root.glob("site=*/*/*.json") if path.stem.isdigit()]
        return max(ids, default=0)

    def _next_id(self) -> int:
        if self._last_id is None:
            self._last_id = self._read_last_id()
        self._last_id += 1
        return self._last_id

    def _locate(self, snapshot_id: int) -> Path | None:
        path = self._locations.get(snapshot_id)
        if path is not None and path.exists():
            return path
        filename = _snapshot_filename(snapshot_id)
        for site_dir in self.root.glob("site=*/*"):
            candidate = site_dir / filename
            if candidate.exists():
                self._locations[snapshot_id] = candidate
                return candidate
        return None

    def latest_snapshot(self, base_url: str) -> Snapshot | None:
        files = _snapshot_files(_site_dir(self.root, base_url))
        if not files:
            return None
        newest = files[-1]
        snapshot, _ = self._load(newest)
        self._locations[int(newest.stem)] = newest
        return snapshot

    def pages_of_snapshot(self, snapshot_id: int) -> List[PageRecord]:
        path = self._locate(snapshot_id)
        if path is None:
            return []
        return self._load(path)[1]

    def save(self, snapshot: Snapshot, pages: Sequence[PageRecord]) -> Snapshot:
        check_unique_urls(pages)
        with self._lock:
            snapshot_id = self._next_id()
            stored = snapshot.model_copy(update={"id": snapshot_id})
            records = [page.model_copy(update={"snapshot_id": snapshot_id}) for page in pages]
            payload = {
                "snapshot": stored.model_dump(mode="json"),
                "pages": [record.model_dump(mode="json") for record in records],
            }

            directory = _site_dir(self.root, stored.base_url)
            target = directory / _snapshot_filename(snapshot_id)
            try:
                _write_json(directory / META_FILENAME, {"base_url": stored.base_url})
                _write_json(target, payload)
                _write_json(self.root / SEQUENCE_FILENAME, {"last_id": snapshot_id})
            except OSError as exc:
                raise StoreError(f"Failed to store snapshot for {stored.base_url}: {exc}") from exc
            self._locations[snapshot_id] = target

        logger.info("Stored snapshot %d for %s with %d pages", snapshot_id, stored.base_url, len(records))
        return stored

    def delete_by_base_url(self, base_url: str) -> None:
        directory = _site_dir(self.root, base_url)
        if not directory.exists():
            return
        with self._lock:
            try:
                shutil.rmtree(directory)
            except OSError as exc:
                raise StoreError(f"Failed to delete snapshots for {base_url}: {exc}") from exc
            self._locations = {
                snapshot_id: path
                for snapshot_id, path in self._locations.items()
                if path.parent != directory
            }
        logger.info("Deleted all snapshots for %s", base_url)

    def all_base_urls(self) -> List[str]:
        """Base URLs read from each site's metadata; unreadable sites are skipped."""

        urls: dict[str, None] = {}
        for meta in sorted(self.root.glob(f"site=*/*/{META_FILENAME}")):
            try:
                base_url = json.loads(meta.read_text(encoding="utf-8"))["base_url"]
            except (OSError, json.JSONDecodeError, KeyError, TypeError) as exc:
                logger.warning("Skipping unreadable site metadata %s: %s", meta, exc)
                continue
            if not isinstance(base_url, str) or not _snapshot_files(meta.parent):
                continue
            urls.setdefault(base_url, None)
        return list(urls)
