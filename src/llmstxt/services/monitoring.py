"""Crawl, persist and diff cycle for monitored sites."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Sequence

from llmstxt.config import AppConfig
from llmstxt.errors import SnapshotNotFoundError
from llmstxt.models import CrawlResult, DiffReport, PageRecord, Snapshot
from llmstxt.services.crawler import SiteCrawler
from llmstxt.services.diff import compute_diff, hashes_by_url
from llmstxt.services.generator import generate_llms_txt
from llmstxt.store import JsonSnapshotStore
from llmstxt.store.base import SnapshotStore

__all__ = ["SnapshotService"]

logger = logging.getLogger(__name__)

TextGenerator = Callable[[Sequence[PageRecord], str], str]


class SnapshotService:
    """Coordinate the crawler with a :class:`~llmstxt.store.SnapshotStore`.

    Calls run on the caller's thread. Overlapping calls for the same base URL
    are not deduplicated here; the scheduler runs sites one after another.
    """

    def __init__(
        self,
        store: SnapshotStore,
        crawler: SiteCrawler | None = None,
        generator: TextGenerator = generate_llms_txt,
    ) -> None:
        self.store = store
        self.crawler = crawler or SiteCrawler()
        self.generator = generator

    @classmethod
    def from_config(cls, config: AppConfig) -> "SnapshotService":
        """Wire a service to the JSON store and crawler settings in ``config``."""

        crawler = SiteCrawler(render_client_side=config.render_client_side)
        return cls(JsonSnapshotStore(config.blob_root), crawler)

    def crawl_and_update(self, base_url: str) -> DiffReport:
        """Crawl ``base_url``, store the new snapshot and diff it against the previous one."""

        logger.info("Starting crawl for baseUrl=%s", base_url)
        previous = self.store.latest_snapshot(base_url)
        old_hashes = (
            hashes_by_url(self.store.pages_of_snapshot(previous.id)) if previous is not None else None
        )

        _, records = self._crawl_and_persist(base_url)
        new_hashes = hashes_by_url(records)

        if old_hashes is None:
            report = DiffReport(added=set(new_hashes))
        else:
            report = compute_diff(old_hashes, new_hashes)

        logger.info(
            "Crawl finished for %s -> added=%d, removed=%d, modified=%d",
            base_url,
            len(report.added),
            len(report.removed),
            len(report.modified),
        )
        return report

    def crawl_and_store(self, base_url: str) -> Snapshot:
        """Crawl ``base_url`` and store the result without computing a diff."""

        snapshot, _ = self._crawl_and_persist(base_url)
        return snapshot

    def recrawl_fresh(self, base_url: str) -> Snapshot:
        """Forget every stored snapshot for ``base_url`` and crawl it from scratch."""

        logger.info("Hard reset requested for baseUrl=%s", base_url)
        self.store.delete_by_base_url(base_url)
        return self.crawl_and_store(base_url)

    def get_latest_text(self, base_url: str) -> str:
        """Render the newest snapshot of ``base_url`` as ``llms.txt``."""

        snapshot = self.store.latest_snapshot(base_url)
        if snapshot is None:
            raise SnapshotNotFoundError(base_url)
        pages = self.store.pages_of_snapshot(snapshot.id)
        return self.generator(pages, base_url)

    def _crawl_and_persist(self, base_url: str) -> tuple[Snapshot, list[PageRecord]]:
        result: CrawlResult = self.crawler.crawl(base_url)
        records = [PageRecord.from_page_info(page) for page in _unique_pages(result)]
        snapshot = self.store.save(Snapshot(base_url=base_url, created_at=datetime.now()), records)
        return snapshot, records


def _unique_pages(result: CrawlResult):
    seen: set[str] = set()
    for page in result.pages:
        if page.url in seen:
            logger.debug("Dropping duplicate page %s from crawl result", page.url)
            continue
        seen.add(page.url)
        yield page
