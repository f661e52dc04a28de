"""Convenience script for crawling sites once and printing their diffs."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

# Ensure the src directory is on the Python path so the llmstxt package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from llmstxt.config import AppConfig  # noqa: E402  (import after path setup)
from llmstxt.errors import LlmsTxtError  # noqa: E402
from llmstxt.services.monitoring import SnapshotService  # noqa: E402


def main(argv: list[str] | None = None) -> None:
    """Crawl the URLs given on the command line, or every configured site."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    urls = list(sys.argv[1:] if argv is None else argv)

    if urls:
        config = AppConfig.load_or_default()
    else:
        try:
            config = AppConfig.from_file()
        except (FileNotFoundError, ValueError) as exc:
            logging.error("Could not load site configuration: %s", exc)
            sys.exit(1)
        urls = [site.url for site in config.iter_sites()]

    service = SnapshotService.from_config(config)
    results = []
    try:
        for base_url in urls:
            logging.info("Crawling %s", base_url)
            try:
                report = service.crawl_and_update(base_url)
            except LlmsTxtError as exc:
                logging.error("Failed to crawl %s: %s", base_url, exc)
                continue
            results.append(
                {
                    "baseUrl": base_url,
                    "added": sorted(report.added),
                    "removed": sorted(report.removed),
                    "modified": sorted(report.modified),
                }
            )
    finally:
        service.crawler.shutdown()

    print(json.dumps(results, indent=2))


if __name__ == "__main__":
    main()
