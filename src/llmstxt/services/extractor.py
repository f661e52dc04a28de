"""HTML extraction and content fingerprinting."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import List
from urllib.parse import urljoin

from bs4 import BeautifulSoup

__all__ = ["ExtractedPage", "extract_page", "sha256_hex", "visible_text"]

_INVISIBLE_TAGS = ["script", "style", "template"]
# Elements that start a new line of text; inline elements join their neighbours.
_BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4",
    "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
    "table", "td", "th", "tr", "ul",
]


@dataclass(slots=True)
class ExtractedPage:
    """Fields pulled out of a single HTML document."""

    title: str = ""
    description: str | None = None
    text: str = ""
    links: List[str] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)


def sha256_hex(data: bytes | str) -> str:
    """Return the lowercase hex SHA-256 digest of ``data`` (strings are UTF-8 encoded)."""

    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _body_text(soup: BeautifulSoup) -> str:
    body = soup.body
    if body is None:
        return ""
    for tag in body(_INVISIBLE_TAGS):
        tag.decompose()
    for tag in body(_BLOCK_TAGS):
        tag.insert_before(" ")
        tag.insert_after(" ")
    return _collapse(body.get_text())


def visible_text(html: str) -> str:
    """Return the whitespace-collapsed visible text of ``html``'s ``<body>``."""

    return _body_text(BeautifulSoup(html, "lxml"))


def _is_description(tag) -> bool:
    return tag.name == "meta" and (tag.get("name") or "").strip().lower() == "description"


def extract_page(html: str, page_url: str) -> ExtractedPage:
    """Extract title, description, text, links and script sources from ``html``.

    Relative ``href``/``src`` values are resolved against ``page_url`` (or the
    document's ``<base href>`` when present).
    """

    soup = BeautifulSoup(html, "lxml")

    base_url = page_url
    base_tag = soup.find("base", href=True)
    if base_tag is not None:
        base_url = urljoin(page_url, base_tag["href"].strip())

    title = _collapse(soup.title.get_text()) if soup.title else ""

    meta = soup.find(_is_description)
    description = meta.get("content", "") if meta is not None else None

    links = [urljoin(base_url, anchor["href"].strip()) for anchor in soup.find_all("a", href=True)]
    scripts = [urljoin(base_url, script["src"].strip()) for script in soup.find_all("script", src=True)]

    return ExtractedPage(
        title=title,
        description=description,
        text=_body_text(soup),
        links=links,
        scripts=scripts,
    )
