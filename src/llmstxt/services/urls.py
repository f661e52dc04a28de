"""URL canonicalisation, host scoping and static-asset classification."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

__all__ = [
    "STATIC_ASSET_SUFFIXES",
    "host_in_scope",
    "host_of",
    "is_static_asset",
    "is_valid_uri",
    "normalize_url",
]

logger = logging.getLogger(__name__)

STATIC_ASSET_SUFFIXES = (".js", ".css", ".map")

# RFC 3986 characters plus percent escapes. Non-ASCII, non-space characters are
# tolerated the way most URI parsers accept "other" characters.
_URI_RE = re.compile(
    r"^(?:[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=]|%[0-9A-Fa-f]{2}|[^\x00-\x7f\s])*$"
)
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_ROOTED_SCHEMES = ("http", "https")


def is_valid_uri(raw: str) -> bool:
    """Return ``True`` when ``raw`` is syntactically a URI reference."""

    if not _URI_RE.match(raw):
        return False
    # A fragment may not itself contain '#'.
    if raw.count("#") > 1:
        return False
    try:
        parts = urlsplit(raw)
        # Accessing ``port`` validates bracketed hosts and numeric ports.
        parts.port
    except ValueError:
        return False
    if parts.scheme and not _SCHEME_RE.match(parts.scheme):
        return False
    return True


def normalize_url(raw: str | None) -> str | None:
    """Return the canonical form of ``raw`` or ``None`` when it should be dropped.

    The URL must parse, must carry a scheme, and loses its ``#fragment``. Host
    and path keep their original case and encoding. An http(s) URL with an
    empty path gets ``/``, the path a client requests for it, so
    ``https://example.com`` and ``https://example.com/`` are one page.
    """

    if raw is None or not raw.strip():
        return None
    if not is_valid_uri(raw):
        logger.debug("Dropping malformed URL: %s", raw)
        return None
    parts = urlsplit(raw)
    if not parts.scheme:
        logger.debug("Dropping URL without scheme: %s", raw)
        return None
    url = raw.split("#", 1)[0]
    if parts.scheme.lower() in _ROOTED_SCHEMES and parts.netloc and not parts.path:
        authority_end = url.index("//") + 2 + len(parts.netloc)
        url = f"{url[:authority_end]}/{url[authority_end:]}"
    return url


def host_of(url: str | None) -> str | None:
    """Return the host component of ``url`` with its case preserved."""

    if not url:
        return None
    try:
        netloc = urlsplit(url).netloc
    except ValueError:
        return None
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        host = host[: host.find("]") + 1]
    else:
        host = host.partition(":")[0]
    return host or None


def host_in_scope(url: str, base_host: str) -> bool:
    """Suffix match on the host, so ``www.`` and other subdomains are admitted."""

    host = host_of(url)
    return host is not None and host.endswith(base_host)


def is_static_asset(url: str | None) -> bool:
    if not url:
        return False
    return url.lower().endswith(STATIC_ASSET_SUFFIXES)
