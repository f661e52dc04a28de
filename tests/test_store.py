from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from llmstxt.errors import StoreError
from llmstxt.models import PageRecord, PageType, Snapshot
from llmstxt.store import InMemorySnapshotStore, JsonSnapshotStore, SnapshotStore


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path: Path) -> SnapshotStore:
    if request.param == "memory":
        return InMemorySnapshotStore()
    return JsonSnapshotStore(tmp_path)


def _pages(*urls: str) -> list[PageRecord]:
    return [PageRecord(url=url, title=url, content_hash=f"hash-{url}") for url in urls]


def test_stores_implement_protocol(store) -> None:
    assert isinstance(store, SnapshotStore)


def test_save_assigns_ids_and_links_pages(store) -> None:
    saved = store.save(Snapshot(base_url="https://example.com"), _pages("https://example.com/", "https://example.com/a"))

    assert saved.id is not None
    pages = store.pages_of_snapshot(saved.id)
    assert [page.url for page in pages] == ["https://example.com/", "https://example.com/a"]
    assert {page.snapshot_id for page in pages} == {saved.id}


def test_latest_snapshot_is_most_recent(store) -> None:
    now = datetime.now()
    store.save(Snapshot(base_url="https://example.com", created_at=now - timedelta(minutes=5)), _pages("u1"))
    newest = store.save(Snapshot(base_url="https://example.com", created_at=now), _pages("u2"))
    store.save(Snapshot(base_url="https://other.org", created_at=now + timedelta(minutes=1)), _pages("u3"))

    latest = store.latest_snapshot("https://example.com")

    assert latest.id == newest.id
    assert [page.url for page in store.pages_of_snapshot(latest.id)] == ["u2"]
    assert store.latest_snapshot("https://missing.example") is None


def test_delete_by_base_url_and_all_base_urls(store) -> None:
    first = store.save(Snapshot(base_url="https://example.com"), _pages("a"))
    store.save(Snapshot(base_url="https://example.com"), _pages("b"))
    store.save(Snapshot(base_url="https://other.org"), _pages("c"))

    assert sorted(store.all_base_urls()) == ["https://example.com", "https://other.org"]

    store.delete_by_base_url("https://example.com")

    assert store.all_base_urls() == ["https://other.org"]
    assert store.latest_snapshot("https://example.com") is None
    assert store.pages_of_snapshot(first.id) == []
    store.delete_by_base_url("https://never-stored.example")


def test_duplicate_urls_are_rejected_without_partial_write(store) -> None:
    with pytest.raises(StoreError):
        store.save(Snapshot(base_url="https://example.com"), _pages("a", "a"))

    assert store.latest_snapshot("https://example.com") is None
    assert store.all_base_urls() == []


def test_json_store_round_trips_across_instances(tmp_path: Path) -> None:
    pages = [
        PageRecord(url="https://example.com/", title="Home", description=None, content_hash="h0"),
        PageRecord(url="https://example.com/app.js", content_hash="h1", page_type=PageType.STATIC_ASSET),
    ]
    saved = JsonSnapshotStore(tmp_path).save(Snapshot(base_url="https://example.com"), pages)

    reopened = JsonSnapshotStore(tmp_path)
    latest = reopened.latest_snapshot("https://example.com")
    loaded = reopened.pages_of_snapshot(saved.id)

    assert latest == saved
    assert loaded[1].page_type is PageType.STATIC_ASSET
    assert loaded[1].title is None
    assert not list(tmp_path.rglob("*.tmp"))


def test_json_store_surfaces_corrupt_files(tmp_path: Path) -> None:
    store = JsonSnapshotStore(tmp_path)
    saved = store.save(Snapshot(base_url="https://example.com"), _pages("a"))
    next(tmp_path.rglob(f"{saved.id:010d}.json")).write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreError):
        store.pages_of_snapshot(saved.id)


def test_blob_root_can_come_from_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("LLMSTXT_BLOB_ROOT", str(tmp_path))

    store = JsonSnapshotStore()
    store.save(Snapshot(base_url="https://example.com"), _pages("a"))

    assert store.root == tmp_path / "snapshots"
    assert list((tmp_path / "snapshots").rglob("*.json"))


def test_json_store_reads_latest_past_corrupt_history(tmp_path: Path) -> None:
    store = JsonSnapshotStore(tmp_path)
    older = store.save(Snapshot(base_url="https://example.com"), _pages("a"))
    newer = store.save(Snapshot(base_url="https://example.com"), _pages("b"))
    next(tmp_path.rglob(f"{older.id:010d}.json")).write_text("{not json", encoding="utf-8")

    reopened = JsonSnapshotStore(tmp_path)

    assert reopened.latest_snapshot("https://example.com") == newer
    assert [page.url for page in reopened.pages_of_snapshot(newer.id)] == ["b"]


def test_json_store_skips_sites_with_unreadable_metadata(tmp_path: Path, caplog) -> None:
    store = JsonSnapshotStore(tmp_path)
    store.save(Snapshot(base_url="https://bad.example"), _pages("a"))
    store.save(Snapshot(base_url="https://good.example"), _pages("b"))
    next(tmp_path.glob("snapshots/site=bad.example/*/meta.json")).write_text("{not json", encoding="utf-8")

    with caplog.at_level("WARNING", logger="llmstxt.store.json_store"):
        assert store.all_base_urls() == ["https://good.example"]

    assert "Skipping unreadable site metadata" in caplog.text


def test_json_store_never_reuses_ids_after_delete(tmp_path: Path) -> None:
    store = JsonSnapshotStore(tmp_path)
    store.save(Snapshot(base_url="https://example.com"), _pages("a"))
    last = store.save(Snapshot(base_url="https://other.org"), _pages("b"))
    store.delete_by_base_url("https://other.org")

    saved = JsonSnapshotStore(tmp_path).save(Snapshot(base_url="https://other.org"), _pages("c"))

    assert saved.id == last.id + 1
