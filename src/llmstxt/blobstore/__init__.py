"""Location of the local blobstore that holds persisted snapshots."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

_PACKAGE_DIR = Path(__file__).resolve().parent

#: Name of the directory under :mod:`llmstxt.blobstore` that contains the data.
DEFAULT_BLOB_SUBDIR = "data"

#: Environment variable that relocates the blob root.
BLOB_ROOT_ENV = "LLMSTXT_BLOB_ROOT"

#: Default location where snapshots are stored.
DEFAULT_BLOB_ROOT = _PACKAGE_DIR / DEFAULT_BLOB_SUBDIR


_Pathish = Union[str, Path]


def resolve_blob_root(blob_root: _Pathish | None = None) -> Path:
    """Return a :class:`Path` pointing at the blob root.

    ``blob_root`` may be either a string or :class:`Path`. When ``None`` is
    provided, ``$LLMSTXT_BLOB_ROOT`` is used if set, else
    :data:`DEFAULT_BLOB_ROOT`. The path is not created on disk.
    """

    if blob_root is None:
        env_root = os.environ.get(BLOB_ROOT_ENV)
        return Path(env_root) if env_root else DEFAULT_BLOB_ROOT
    if isinstance(blob_root, Path):
        return blob_root
    return Path(blob_root)


__all__ = [
    "BLOB_ROOT_ENV",
    "DEFAULT_BLOB_ROOT",
    "DEFAULT_BLOB_SUBDIR",
    "resolve_blob_root",
]
