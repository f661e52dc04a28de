"""Plain-text ``llms.txt`` rendering of stored page records."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from llmstxt.models import PageRecord

__all__ = ["generate_llms_txt"]

logger = logging.getLogger(__name__)


def generate_llms_txt(
    pages: Sequence[PageRecord] | None,
    base_url: str,
    *,
    generated_at: datetime | None = None,
) -> str:
    """Render ``pages`` as an ``llms.txt`` inventory for ``base_url``.

    Titles and descriptions are omitted only when they are ``None``; an empty
    title still produces a ``TITLE: `` line. ``None`` pages render as ``""``.
    """

    if pages is None:
        logger.warning("Pages list is None for baseUrl=%s, returning empty result", base_url)
        return ""

    timestamp = (generated_at or datetime.now()).isoformat()
    lines = [
        f"# llms.txt generated for {base_url}",
        f"# Generated at {timestamp}",
        "",
    ]
    for page in pages:
        lines.append(f"URL: {page.url}")
        if page.title is not None:
            lines.append(f"TITLE: {page.title}")
        if page.description is not None:
            lines.append(f"DESCRIPTION: {page.description}")
        lines.append("")

    text = "\n".join(lines) + "\n"
    logger.info("Generated llms.txt for baseUrl=%s with %d pages (%d characters)", base_url, len(pages), len(text))
    return text
