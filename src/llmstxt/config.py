"""Configuration models and helpers for the llms.txt monitor."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterable, List

from pydantic import BaseModel, Field, ValidationError

__all__ = [
    "AppConfig",
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG_PATH",
    "SiteConfig",
]

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "data" / "config.json"
CONFIG_PATH_ENV = "LLMSTXT_CONFIG"


def _config_path(path: Path | str | None) -> Path:
    if path:
        return Path(path)
    env_path = os.environ.get(CONFIG_PATH_ENV)
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


class SiteConfig(BaseModel):
    """A site whose ``llms.txt`` should be kept up to date."""

    name: str = Field(..., description="Human friendly site name")
    url: str = Field(..., description="Base URL the crawl starts from")


class AppConfig(BaseModel):
    """Settings for the monitor, the scheduler and the seed sites."""

    sites: List[SiteConfig] = Field(default_factory=list)
    interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Delay between the end of one monitoring cycle and the start of the next",
    )
    blob_root: str | None = Field(
        default=None,
        description="Directory for stored snapshots. Defaults to the package blobstore.",
    )
    render_client_side: bool = Field(
        default=True,
        description="Whether pages that look client-rendered are re-rendered in headless Chromium",
    )
    start_scheduler: bool = Field(
        default=False,
        description="Whether the API process runs the periodic re-crawl in the background",
    )

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> "AppConfig":
        """Load configuration data from a JSON file."""

        config_path = _config_path(path)
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Configuration file not found: {config_path}") from exc
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in configuration file: {config_path}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Configuration file is invalid: {config_path}\n{exc}") from exc

    @classmethod
    def load_or_default(cls, path: Path | str | None = None) -> "AppConfig":
        """Like :meth:`from_file`, but fall back to defaults when the file is missing."""

        try:
            return cls.from_file(path)
        except FileNotFoundError:
            return cls()

    def dump(self, path: Path | str | None = None) -> None:
        """Persist the configuration back to disk as JSON."""

        config_path = _config_path(path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(self.model_dump_json(indent=2), encoding="utf-8")

    def iter_sites(self) -> Iterable[SiteConfig]:
        """Iterate over configured sites."""

        return iter(self.sites)
