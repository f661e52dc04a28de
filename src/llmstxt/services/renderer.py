"""Client-side rendering fallback for pages that ship an empty shell."""

from __future__ import annotations

import logging
from typing import Protocol

from playwright.sync_api import sync_playwright

from llmstxt.errors import RenderError
from llmstxt.services.extractor import visible_text

__all__ = [
    "CSR_THRESHOLD_BYTES",
    "CsrRenderer",
    "HtmlRenderer",
    "RICHNESS_FACTOR",
    "choose_html",
    "is_likely_csr",
    "is_richer_content",
]

logger = logging.getLogger(__name__)

CSR_THRESHOLD_BYTES = 3 * 1024
RICHNESS_FACTOR = 1.2
RENDER_TIMEOUT_MS = 30_000

_CSR_MARKERS = ('id="root"', "id='root'", "<app-root", "</app-root>")


class HtmlRenderer(Protocol):
    def render_client_side(self, url: str) -> str | None: ...


def is_likely_csr(html: str | None) -> bool:
    """Heuristically decide whether ``html`` is a client-rendered shell."""

    if not html:
        return False
    if len(html) < CSR_THRESHOLD_BYTES:
        logger.debug("HTML length (%d) is below threshold (%d), likely CSR", len(html), CSR_THRESHOLD_BYTES)
        return True
    lowered = html.lower()
    if any(marker in lowered for marker in _CSR_MARKERS):
        logger.debug("Found CSR root marker, likely CSR")
        return True
    return False


def is_richer_content(rendered_html: str | None, ssr_html: str | None) -> bool:
    """Return ``True`` when the rendered DOM carries at least 20% more markup or text."""

    if rendered_html is None:
        return False
    if ssr_html is None:
        return True

    if len(rendered_html) > len(ssr_html) * RICHNESS_FACTOR:
        logger.debug("Rendered HTML is richer: %d vs %d chars", len(rendered_html), len(ssr_html))
        return True

    rendered_text = visible_text(rendered_html)
    ssr_text = visible_text(ssr_html)
    if len(rendered_text) > len(ssr_text) * RICHNESS_FACTOR:
        logger.debug("Rendered text is richer: %d vs %d chars", len(rendered_text), len(ssr_text))
        return True
    return False


def choose_html(url: str, ssr_html: str, renderer: HtmlRenderer | None) -> str:
    """Return the HTML to extract from, swapping in a rendered DOM when it is richer."""

    if renderer is None or not is_likely_csr(ssr_html):
        return ssr_html

    logger.debug("Page appears to be CSR, attempting client-side render: %s", url)
    rendered = renderer.render_client_side(url)
    if rendered is None:
        logger.debug("Client-side rendering failed, using SSR version for: %s", url)
        return ssr_html
    if is_richer_content(rendered, ssr_html):
        logger.debug("Client-side rendered DOM is richer, using it for: %s", url)
        return rendered
    logger.debug("Client-side rendered DOM not richer, using SSR version for: %s", url)
    return ssr_html


class CsrRenderer:
    """Render URLs in headless Chromium and return the hydrated DOM."""

    def __init__(self, *, timeout_ms: int = RENDER_TIMEOUT_MS, executable_path: str | None = None) -> None:
        self.timeout_ms = timeout_ms
        self.executable_path = executable_path

    def render_client_side(self, url: str) -> str | None:
        """Return the serialised DOM once the network is idle, or ``None`` on any failure."""

        if not url or not url.strip():
            logger.warning("Invalid URL provided for rendering: %r", url)
            return None

        try:
            return self.render_or_raise(url)
        except RenderError as exc:
            logger.debug("%s", exc)
            return None

    def render_or_raise(self, url: str) -> str:
        """Render ``url`` raising :class:`RenderError` on any browser failure."""

        try:
            with sync_playwright() as playwright:
                browser = playwright.chromium.launch(
                    headless=True,
                    executable_path=self.executable_path,
                )
                try:
                    page = browser.new_page()
                    page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
                    return page.content()
                finally:
                    browser.close()
        except Exception as exc:  # noqa: BLE001 - Playwright raises several unrelated types
            raise RenderError(f"Failed to render {url}: {exc}") from exc
