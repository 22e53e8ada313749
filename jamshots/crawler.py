"""Sequential crawl of the results listing and screenshot download loop."""

from __future__ import annotations

import logging
import os
import time
import uuid
from contextlib import suppress
from pathlib import Path
from typing import Callable, Optional

import requests
from bs4 import BeautifulSoup

from .config import ScraperConfig
from .extractor import extract_entries
from .fetcher import build_session, fetch_image, fetch_page
from .images import detect_image_format
from .models import CrawlCursor, CrawlSummary, DownloadRecord, DownloadStatus, GameEntry
from .pagination import find_next_page

logger = logging.getLogger("jamshots")


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` next to ``path`` and move it into place in one step."""
    temp_path = path.with_name(f"{path.name}.part.{uuid.uuid4().hex}")
    try:
        temp_path.write_bytes(data)
        os.replace(temp_path, path)
    finally:
        with suppress(FileNotFoundError):
            temp_path.unlink()


def download_entry(
    session: requests.Session,
    entry: GameEntry,
    config: ScraperConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> DownloadRecord:
    """Save one screenshot unless its file is already present."""
    record = DownloadRecord(entry)
    destination = config.output_dir / record.filename

    if destination.exists():
        record.status = DownloadStatus.SKIPPED
        logger.info("  %d. %s -> %s [SKIPPED - exists]", entry.rank, entry.title, record.filename)
        return record

    sleep(config.download_delay)
    data = fetch_image(session, entry.image_url, config)
    if data is not None and config.verify_images and not detect_image_format(data):
        logger.warning("Response from %s is not an image", entry.image_url)
        data = None

    if data is None:
        record.status = DownloadStatus.FAILED
    else:
        try:
            write_atomic(destination, data)
            record.status = DownloadStatus.DOWNLOADED
        except OSError as exc:
            logger.warning("Failed to write image %s: %s", destination, exc)
            record.status = DownloadStatus.FAILED

    label = "OK" if record.status == DownloadStatus.DOWNLOADED else "FAILED"
    logger.info("  %d. %s -> %s [%s]", entry.rank, entry.title, record.filename, label)
    return record


def run_crawler(
    config: ScraperConfig,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> CrawlSummary:
    """Walk every results page from ``config.base_url`` and download screenshots."""
    config.output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Output directory: %s", config.output_dir)
    session = session or build_session(config)
    summary = CrawlSummary()
    cursor: Optional[CrawlCursor] = CrawlCursor(config.base_url)
    visited = {config.base_url}

    while cursor is not None:
        logger.info("Fetching page %d: %s", cursor.page_number, cursor.url)
        html = fetch_page(session, cursor.url, config)
        if html is None:
            summary.stopped_early = True
            logger.warning("Stopped early at page %d", cursor.page_number)
            break
        summary.pages += 1

        soup = BeautifulSoup(html, "html.parser")
        games = extract_entries(soup, cursor.page_number, config)
        if cursor.page_number == 1:
            summary.first_page_entries = len(games)
        if games:
            logger.info("Found %d games on page %d", len(games), cursor.page_number)
        else:
            page_title = soup.title.get_text().strip() if soup.title else ""
            logger.info("No games found on page %d", cursor.page_number)
            logger.debug("Page title = %s", page_title)

        for entry in games:
            summary.add(download_entry(session, entry, config, sleep))

        next_cursor = cursor.advance(find_next_page(soup, cursor.url))
        if next_cursor is None:
            logger.info("No more pages found.")
        elif next_cursor.url in visited:
            logger.info("Pagination loops back to %s; stopping.", next_cursor.url)
            next_cursor = None
        else:
            visited.add(next_cursor.url)
            sleep(config.request_delay)
        cursor = next_cursor

    logger.info(
        "Summary: %d games found, %d downloaded, %d skipped, %d failed",
        summary.total,
        summary.downloaded,
        summary.skipped,
        summary.failed,
    )
    return summary
