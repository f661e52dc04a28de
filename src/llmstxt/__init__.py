"""llms.txt monitor exposing configuration, storage, API, and crawl services."""

from __future__ import annotations

from .config import AppConfig, SiteConfig

__all__ = ["AppConfig", "SiteConfig"]
