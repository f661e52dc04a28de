from __future__ import annotations

from typing import Iterable

import pytest
import requests

from llmstxt.models import CrawlResult, PageInfo
from llmstxt.services.crawler import SiteCrawler
from llmstxt.services.fetcher import Fetcher


class DummyResponse:
    def __init__(
        self,
        body: str | bytes,
        status_code: int = 200,
        content_type: str = "text/html; charset=utf-8",
    ) -> None:
        self.content = body.encode("utf-8") if isinstance(body, str) else body
        self.status_code = status_code
        self.headers = {"Content-Type": content_type} if content_type else {}
        self.encoding = "utf-8" if "charset=" in content_type else "ISO-8859-1"
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        yield self.content

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Stand-in for :class:`requests.Session` serving canned responses by URL."""

    def __init__(self, responses: dict) -> None:
        self.responses = responses
        self.headers: dict[str, str] = {}
        self.requested: list[str] = []
        self.request_headers: list[dict] = []
        self.closed = False

    def get(self, url, headers=None, timeout=None, stream=False):
        self.requested.append(url)
        self.request_headers.append(dict(headers or {}))
        response = self.responses.get(url)
        if response is None:
            raise requests.ConnectionError(f"No route to {url}")
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


class FakeRenderer:
    def __init__(self, html: str | None) -> None:
        self.html = html
        self.rendered: list[str] = []

    def render_client_side(self, url: str) -> str | None:
        self.rendered.append(url)
        return self.html


class FakeCrawler:
    """Returns one canned :class:`CrawlResult` per call, in order."""

    def __init__(self, *results: Iterable[tuple[str, str]]) -> None:
        self._results = [list(result) for result in results]
        self.calls: list[str] = []
        self.shut_down = False

    def crawl(self, base_url: str) -> CrawlResult:
        self.calls.append(base_url)
        pairs = self._results.pop(0)
        return CrawlResult(
            base_url=base_url,
            pages=[PageInfo(url=url, title="", content_hash=digest) for url, digest in pairs],
        )

    def shutdown(self, wait: bool = True) -> None:
        self.shut_down = True


def html_page(
    title: str = "",
    *,
    links: Iterable[str] = (),
    scripts: Iterable[str] = (),
    description: str | None = None,
    body: str = "",
) -> str:
    meta = f'<meta name="description" content="{description}">' if description is not None else ""
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
    script_tags = "".join(f'<script src="{src}"></script>' for src in scripts)
    return (
        f"<html><head><title>{title}</title>{meta}{script_tags}</head>"
        f"<body><p>{body}</p>{anchors}</body></html>"
    )


@pytest.fixture
def make_crawler():
    """Build a crawler over a fake site; crawlers are shut down after the test."""

    created: list[SiteCrawler] = []

    def _make(responses: dict, *, renderer=None, **kwargs) -> tuple[SiteCrawler, FakeSession]:
        session = FakeSession(responses)
        crawler = SiteCrawler(
            Fetcher(session),
            renderer,
            render_client_side=renderer is not None,
            **kwargs,
        )
        created.append(crawler)
        return crawler, session

    yield _make

    for crawler in created:
        crawler.shutdown()
