"""Bounded breadth-first crawler producing per-page content fingerprints."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError, ThreadPoolExecutor
from typing import Iterable, List

from llmstxt.errors import InvalidBaseUrlError
from llmstxt.models import CrawlResult, PageInfo, PageType
from llmstxt.services.extractor import extract_page, sha256_hex
from llmstxt.services.fetcher import Fetcher
from llmstxt.services.renderer import CSR_THRESHOLD_BYTES, CsrRenderer, HtmlRenderer, choose_html
from llmstxt.services.urls import (
    host_in_scope,
    host_of,
    is_static_asset,
    is_valid_uri,
    normalize_url,
)

__all__ = [
    "CONCURRENCY",
    "CSR_THRESHOLD_BYTES",
    "MAX_DEPTH",
    "MAX_PAGES",
    "SiteCrawler",
    "TIMEOUT_MS",
]

logger = logging.getLogger(__name__)

MAX_PAGES = 100
MAX_DEPTH = 3
TIMEOUT_MS = 8000
CONCURRENCY = 4


class _CrawlState:
    """Visited set and page list shared by the workers of one crawl."""

    def __init__(self, max_pages: int) -> None:
        self.max_pages = max_pages
        self._lock = threading.Lock()
        self._visited: set[str] = set()
        self._pages: List[PageInfo] = []

    def claim(self, url: str) -> bool:
        """Mark ``url`` visited, returning ``False`` if another worker got there first."""

        with self._lock:
            if url in self._visited:
                return False
            self._visited.add(url)
            return True

    def is_visited(self, url: str) -> bool:
        with self._lock:
            return url in self._visited

    def record(self, page: PageInfo) -> bool:
        with self._lock:
            if len(self._pages) >= self.max_pages:
                return False
            self._pages.append(page)
            return True

    @property
    def full(self) -> bool:
        with self._lock:
            return len(self._pages) >= self.max_pages

    @property
    def pages(self) -> List[PageInfo]:
        with self._lock:
            return list(self._pages)


class SiteCrawler:
    """Level-synchronous BFS over a single host.

    Each level is fanned out to a pool of ``concurrency`` workers and joined
    before the next level starts, so pages come back level by level. Failures
    inside a worker only drop that page.
    """

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        renderer: HtmlRenderer | None = None,
        *,
        render_client_side: bool = True,
        max_pages: int = MAX_PAGES,
        max_depth: int = MAX_DEPTH,
        concurrency: int = CONCURRENCY,
    ) -> None:
        self._fetcher = fetcher or Fetcher(timeout=TIMEOUT_MS / 1000)
        if renderer is None and render_client_side:
            renderer = CsrRenderer()
        self._renderer = renderer
        self.max_pages = max_pages
        self.max_depth = max_depth
        self.concurrency = concurrency
        self._stopping = threading.Event()
        self._executor = ThreadPoolExecutor(
            max_workers=concurrency,
            thread_name_prefix="llmstxt-crawl",
        )

    def __enter__(self) -> "SiteCrawler":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def shutdown(self, wait: bool = True) -> None:
        """Stop in-flight workers between steps and release the worker pool and session."""

        if self._stopping.is_set():
            return
        self._stopping.set()
        self._executor.shutdown(wait=wait, cancel_futures=True)
        self._fetcher.close()
        logger.debug("Crawler shut down")

    def crawl(self, base_url: str) -> CrawlResult:
        """Crawl ``base_url`` and return the pages found in discovery order.

        Raises :class:`InvalidBaseUrlError` when ``base_url`` is missing or not a
        URI. A blank, scheme-less or host-less base URL yields an empty result.
        """

        if self._stopping.is_set():
            raise RuntimeError("Crawler has been shut down")

        logger.info("Starting crawl for baseUrl=%s", base_url)
        if base_url is None:
            raise InvalidBaseUrlError(base_url, "a base URL is required")
        if base_url.strip() and not is_valid_uri(base_url):
            logger.error("Failed to parse baseUrl=%r", base_url)
            raise InvalidBaseUrlError(base_url)

        start = normalize_url(base_url)
        base_host = host_of(start)
        if start is None or base_host is None:
            logger.info("Nothing to crawl for baseUrl=%r", base_url)
            return CrawlResult(base_url=base_url, pages=[])

        state = _CrawlState(self.max_pages)
        frontier: List[str] = [start]

        for depth in range(self.max_depth + 1):
            if not frontier or state.full or self._stopping.is_set():
                break

            batch = self._admit(frontier, base_host, state)
            logger.debug("Depth %d: dispatching %d of %d frontier URLs", depth, len(batch), len(frontier))

            discovered: List[str] = []
            futures = [
                self._executor.submit(self._process_page, url, depth, base_host, state)
                for url in batch
            ]
            for future in futures:
                try:
                    discovered.extend(future.result())
                except CancelledError:
                    continue

            frontier = [url for url in dict.fromkeys(discovered) if not state.is_visited(url)]
            if frontier and depth + 1 > self.max_depth:
                logger.debug("Dropping %d URLs beyond max depth %d", len(frontier), self.max_depth)

        pages = state.pages
        if len(pages) >= self.max_pages:
            logger.info("Reached maximum page limit (%d), stopping crawl", self.max_pages)
        logger.info("Crawl completed for baseUrl=%s, found %d pages", base_url, len(pages))
        return CrawlResult(base_url=base_url, pages=pages)

    def _admit(self, frontier: Iterable[str], base_host: str, state: _CrawlState) -> List[str]:
        """Normalise, host-scope and claim the frontier URLs for this level."""

        admitted: List[str] = []
        for candidate in frontier:
            url = normalize_url(candidate)
            if url is None:
                continue
            if not host_in_scope(url, base_host):
                logger.debug("Skipping URL with different host: %s (expected: %s)", url, base_host)
                continue
            if state.claim(url):
                admitted.append(url)
        return admitted

    def _process_page(self, url: str, depth: int, base_host: str, state: _CrawlState) -> List[str]:
        try:
            return self._fetch_and_record(url, depth, base_host, state)
        except Exception as exc:  # noqa: BLE001 - one bad page must not stop its siblings
            logger.debug("Error processing page %s: %s", url, exc)
            return []

    def _fetch_and_record(self, url: str, depth: int, base_host: str, state: _CrawlState) -> List[str]:
        if self._stopping.is_set() or state.full:
            return []

        logger.debug("Fetching page: %s (depth: %d)", url, depth)
        result = self._fetcher.fetch(url)
        if result is None:
            return []

        html = choose_html(url, result.text, self._renderer)
        if self._stopping.is_set():
            return []

        page = extract_page(html, url)
        content_hash = sha256_hex(page.text)
        recorded = state.record(
            PageInfo(
                url=url,
                title=page.title,
                description=page.description,
                content_hash=content_hash,
                page_type=PageType.PAGE,
            )
        )
        if recorded:
            logger.debug("Processed page: %s (title: %s, hash: %s)", url, page.title, content_hash)

        candidates: List[str] = []
        skipped_assets = 0
        for href in page.links:
            normalized = normalize_url(href)
            if normalized is None:
                continue
            if is_static_asset(normalized):
                skipped_assets += 1
                continue
            if not state.is_visited(normalized):
                candidates.append(normalized)
        logger.debug(
            "Found %d links on page %s, kept %d, skipped %d static assets",
            len(page.links),
            url,
            len(candidates),
            skipped_assets,
        )

        self._capture_assets(page.scripts, base_host, state)
        return candidates

    def _capture_assets(self, scripts: Iterable[str], base_host: str, state: _CrawlState) -> None:
        """Fetch and hash ``<script src>`` resources without following anything inside them."""

        for src in scripts:
            if state.full or self._stopping.is_set():
                return
            normalized = normalize_url(src)
            if normalized is None or not host_in_scope(normalized, base_host):
                continue
            if not state.claim(normalized):
                continue
            try:
                result = self._fetcher.fetch(normalized, any_content_type=True)
                if result is None:
                    continue
                state.record(
                    PageInfo(
                        url=normalized,
                        title=None,
                        description=None,
                        content_hash=sha256_hex(result.content),
                        page_type=PageType.STATIC_ASSET,
                    )
                )
                logger.debug("Processed script asset: %s", normalized)
            except Exception as exc:  # noqa: BLE001 - per-script errors are ignored
                logger.debug("Error processing script asset %s: %s", normalized, exc)
