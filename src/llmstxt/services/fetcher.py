"""HTTP fetching with a fixed user agent and a per-request deadline."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import requests

from llmstxt.errors import FetchError

__all__ = ["Fetcher", "FetchResult", "TIMEOUT_SECONDS", "USER_AGENT"]

logger = logging.getLogger(__name__)

USER_AGENT = "llms-txt-crawler"
TIMEOUT_SECONDS = 8.0
DEFAULT_HEADERS = {"User-Agent": USER_AGENT}

_CHUNK_SIZE = 64 * 1024


@dataclass(slots=True)
class FetchResult:
    """Body and content type of a successful GET."""

    url: str
    content: bytes
    content_type: str = ""
    encoding: str | None = None

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding or "utf-8", errors="replace")


def is_text_content_type(content_type: str) -> bool:
    """Return ``True`` for content types acceptable as an HTML page."""

    if not content_type:
        return True
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime.startswith("text/") or mime == "application/xml" or mime.endswith("+xml")


class Fetcher:
    """Issue GET requests, returning ``None`` instead of raising on failure."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float = TIMEOUT_SECONDS,
    ) -> None:
        self._session = session or requests.Session()
        self._session.headers.update(DEFAULT_HEADERS)
        self.timeout = timeout

    def fetch(self, url: str, *, any_content_type: bool = False) -> FetchResult | None:
        """Fetch ``url``; ``None`` signals a failure that has already been logged."""

        try:
            return self.fetch_or_raise(url, any_content_type=any_content_type)
        except FetchError as exc:
            logger.debug("%s", exc)
            return None

    def fetch_or_raise(self, url: str, *, any_content_type: bool = False) -> FetchResult:
        """Fetch ``url`` raising :class:`FetchError` on timeouts, HTTP errors and bad types."""

        deadline = time.monotonic() + self.timeout
        try:
            response = self._session.get(
                url,
                headers=DEFAULT_HEADERS,
                timeout=self.timeout,
                stream=True,
            )
        except requests.RequestException as exc:
            raise FetchError(url, str(exc)) from exc

        try:
            if not 200 <= response.status_code < 300:
                raise FetchError(url, f"HTTP {response.status_code}")

            content_type = response.headers.get("Content-Type", "")
            if not any_content_type and not is_text_content_type(content_type):
                raise FetchError(url, f"unsupported content type {content_type!r}")

            chunks = []
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if time.monotonic() > deadline:
                    raise FetchError(url, f"timed out after {self.timeout:.0f}s")
                chunks.append(chunk)
        except requests.RequestException as exc:
            raise FetchError(url, str(exc)) from exc
        finally:
            response.close()

        return FetchResult(
            url=url,
            content=b"".join(chunks),
            content_type=content_type,
            encoding=response.encoding if "charset=" in content_type.lower() else None,
        )

    def close(self) -> None:
        self._session.close()
