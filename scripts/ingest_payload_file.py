"""Ingest a JSON file of raw listing payloads as one page.

Usage:
    python scripts/ingest_payload_file.py payloads.json --target UT
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from property_tracker.crawlers.base import ScrapePage
from property_tracker.db.session import dispose_engine, get_sessionmaker
from property_tracker.services.scrape_run_service import ScrapeRunService

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CliArgs:
    payload_file: Path
    target: str
    page_url: str


def _parse_args() -> CliArgs:
    parser = argparse.ArgumentParser(
        description="Ingest raw listing payloads from a JSON file."
    )
    _ = parser.add_argument("payload_file", type=Path, help="JSON list of payloads.")
    _ = parser.add_argument(
        "--target",
        default="manual",
        help="Scrape target recorded on the run (for example a state code).",
    )
    _ = parser.add_argument(
        "--page-url",
        default="",
        help="Source URL recorded with the page; defaults to the file path.",
    )
    namespace = parser.parse_args()
    payload_file = cast(Path, namespace.payload_file)
    return CliArgs(
        payload_file=payload_file,
        target=cast(str, namespace.target),
        page_url=cast(str, namespace.page_url) or payload_file.as_posix(),
    )


def load_payloads(path: Path) -> list[dict[str, object]]:
    """Read payloads from a JSON list or an object with a ``payloads`` list."""

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("payloads")
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of payloads")
    return [item for item in data if isinstance(item, dict)]


async def _single_page(page: ScrapePage):
    yield page


async def run(args: CliArgs) -> dict[str, object]:
    payloads = load_payloads(args.payload_file)
    logger.info("Loaded %s payloads from %s", len(payloads), args.payload_file)
    service = ScrapeRunService(get_sessionmaker())
    page = ScrapePage(page_url=args.page_url, payloads=payloads)
    try:
        summary = await service.run(args.target, _single_page(page))
    finally:
        await dispose_engine()
    return {
        "run_id": summary.run_id,
        "target": summary.target,
        "properties_seen": summary.properties_seen,
        "created": summary.created,
        "updated": summary.updated,
        "rejected": summary.rejected,
    }


def main() -> None:
    args = _parse_args()
    report = asyncio.run(run(args))
    print(json.dumps(report, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
