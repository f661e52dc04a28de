"""Exception types raised by the crawl, storage and monitoring layers."""

from __future__ import annotations

__all__ = [
    "LlmsTxtError",
    "InvalidBaseUrlError",
    "FetchError",
    "RenderError",
    "StoreError",
    "SnapshotNotFoundError",
]


class LlmsTxtError(Exception):
    """Base class for every error raised by :mod:`llmstxt`."""


class InvalidBaseUrlError(LlmsTxtError, ValueError):
    """The base URL handed to a crawl could not be parsed."""

    def __init__(self, base_url: object, reason: str = "not a valid URI") -> None:
        super().__init__(f"Failed to crawl {base_url!r}: {reason}")
        self.base_url = base_url
        self.reason = reason


class FetchError(LlmsTxtError):
    """A single URL could not be fetched. Never escapes the crawl loop."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class RenderError(LlmsTxtError):
    """Headless rendering of a URL failed. Never escapes the crawl loop."""


class StoreError(LlmsTxtError):
    """A snapshot store could not read or persist data."""


class SnapshotNotFoundError(LlmsTxtError, LookupError):
    """No snapshot has been stored for the requested base URL."""

    def __init__(self, base_url: str) -> None:
        super().__init__(f"No snapshot found for baseUrl={base_url}")
        self.base_url = base_url
