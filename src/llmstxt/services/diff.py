"""Set algebra over ``{url: content_hash}`` mappings."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Protocol

from llmstxt.models import DiffReport

__all__ = ["compute_diff", "hashes_by_url"]


class _Hashed(Protocol):
    url: str
    content_hash: str


def hashes_by_url(pages: Iterable[_Hashed]) -> Dict[str, str]:
    """Map each page URL to its hash, keeping the first hash seen for a repeated URL."""

    hashes: Dict[str, str] = {}
    for page in pages:
        hashes.setdefault(page.url, page.content_hash)
    return hashes


def compute_diff(old: Mapping[str, str], new: Mapping[str, str]) -> DiffReport:
    """Return the URLs added to, removed from and modified between ``old`` and ``new``."""

    old_urls = old.keys()
    new_urls = new.keys()
    return DiffReport(
        added=set(new_urls - old_urls),
        removed=set(old_urls - new_urls),
        modified={url for url in old_urls & new_urls if old[url] != new[url]},
    )
