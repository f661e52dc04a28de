from __future__ import annotations

import threading
from pathlib import Path

import pytest

from llmstxt.errors import StoreError
from llmstxt.models import DiffReport, PageRecord, Snapshot
from llmstxt.services.monitoring import SnapshotService
from llmstxt.services.scheduler import DEFAULT_INTERVAL_SECONDS, AutoUpdateScheduler
from llmstxt.store import JsonSnapshotStore

from conftest import FakeCrawler


class StubService:
    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.calls: list[str] = []
        self.called = threading.Event()

    def crawl_and_update(self, base_url: str) -> DiffReport:
        self.calls.append(base_url)
        self.called.set()
        if base_url in self.failing:
            raise RuntimeError(f"crawl failed for {base_url}")
        return DiffReport(added={f"{base_url}/new"})


class StubStore:
    def __init__(self, urls: list[str]) -> None:
        self.urls = urls

    def all_base_urls(self) -> list[str]:
        return list(self.urls)


def test_default_interval() -> None:
    assert DEFAULT_INTERVAL_SECONDS == 30.0


def test_run_monitoring_with_no_sites() -> None:
    service = StubService()

    assert AutoUpdateScheduler(service, StubStore([])).run_monitoring() == {}
    assert service.calls == []


def test_run_monitoring_visits_every_site() -> None:
    service = StubService()
    scheduler = AutoUpdateScheduler(service, StubStore(["https://a.example", "https://b.example"]))

    results = scheduler.run_monitoring()

    assert service.calls == ["https://a.example", "https://b.example"]
    assert results["https://b.example"].added == {"https://b.example/new"}


def test_one_failing_site_does_not_abort_the_cycle(caplog) -> None:
    service = StubService(failing={"https://b.example"})
    store = StubStore(["https://a.example", "https://b.example", "https://c.example"])

    results = AutoUpdateScheduler(service, store).run_monitoring()

    assert service.calls == ["https://a.example", "https://b.example", "https://c.example"]
    assert set(results) == {"https://a.example", "https://c.example"}
    assert "Monitoring failed for https://b.example" in caplog.text


def test_corrupt_snapshot_of_one_site_does_not_stop_the_others(tmp_path: Path, caplog) -> None:
    store = JsonSnapshotStore(tmp_path)
    for base_url in ("https://bad.example", "https://good.example"):
        store.save(Snapshot(base_url=base_url), [PageRecord(url=f"{base_url}/", content_hash="h1")])
    next(tmp_path.glob("snapshots/site=bad.example/*/0*.json")).write_text("{not json", encoding="utf-8")
    crawler = FakeCrawler([("https://good.example/", "h2")])

    results = AutoUpdateScheduler(SnapshotService(store, crawler), store).run_monitoring()

    assert crawler.calls == ["https://good.example"]
    assert results["https://good.example"].modified == {"https://good.example/"}
    assert "Monitoring failed for https://bad.example" in caplog.text


def test_store_errors_propagate_from_a_cycle() -> None:
    class BrokenStore:
        def all_base_urls(self):
            raise StoreError("Database error")

    with pytest.raises(StoreError, match="Database error"):
        AutoUpdateScheduler(StubService(), BrokenStore()).run_monitoring()


def test_start_runs_cycles_in_background_until_stopped() -> None:
    service = StubService()
    scheduler = AutoUpdateScheduler(service, StubStore(["https://a.example"]), interval_seconds=0.01)

    scheduler.start()
    try:
        assert service.called.wait(timeout=5)
        assert scheduler.running
    finally:
        scheduler.stop(timeout=5)

    assert not scheduler.running
    assert service.calls[0] == "https://a.example"
