"""Snapshot persistence backends."""

from __future__ import annotations

from .base import SnapshotStore  # noqa: F401
from .json_store import JsonSnapshotStore  # noqa: F401
from .memory import InMemorySnapshotStore  # noqa: F401

__all__ = ["InMemorySnapshotStore", "JsonSnapshotStore", "SnapshotStore"]
