"""Service layer entry points for the llms.txt monitor."""

from __future__ import annotations

from .crawler import SiteCrawler  # noqa: F401
from .diff import compute_diff  # noqa: F401
from .generator import generate_llms_txt  # noqa: F401
from .monitoring import SnapshotService  # noqa: F401
from .scheduler import AutoUpdateScheduler  # noqa: F401

__all__ = [
    "AutoUpdateScheduler",
    "SiteCrawler",
    "SnapshotService",
    "compute_diff",
    "generate_llms_txt",
]
