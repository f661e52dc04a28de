"""Background trigger that re-crawls every monitored site on a fixed delay."""

from __future__ import annotations

import logging
import threading
from typing import Dict

from llmstxt.models import DiffReport
from llmstxt.services.monitoring import SnapshotService
from llmstxt.store.base import SnapshotStore

__all__ = ["AutoUpdateScheduler", "DEFAULT_INTERVAL_SECONDS"]

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30.0


class AutoUpdateScheduler:
    """Call :meth:`SnapshotService.crawl_and_update` for each stored base URL."""

    def __init__(
        self,
        service: SnapshotService,
        store: SnapshotStore | None = None,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        self.service = service
        self.store = store or service.store
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def run_monitoring(self) -> Dict[str, DiffReport]:
        """Run one cycle; a failing site is logged and the remaining sites still run."""

        monitored_sites = self.store.all_base_urls()
        logger.info("runMonitoring triggered, monitoredSites=%s", monitored_sites)

        results: Dict[str, DiffReport] = {}
        for base_url in monitored_sites:
            try:
                report = self.service.crawl_and_update(base_url)
            except Exception:  # noqa: BLE001 - one site must not abort the cycle
                logger.exception("Monitoring failed for %s", base_url)
                continue
            logger.info(
                "Result for %s -> added=%d, removed=%d, modified=%d",
                base_url,
                len(report.added),
                len(report.removed),
                len(report.modified),
            )
            results[base_url] = report
        return results

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="llmstxt-scheduler", daemon=True)
        self._thread.start()
        logger.info("Scheduler started with interval %.1fs", self.interval_seconds)

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Scheduler stopped")

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.run_monitoring()
            except Exception:  # noqa: BLE001 - keep the background thread alive
                logger.exception("Monitoring cycle failed")
            if self._stop.wait(self.interval_seconds):
                break
