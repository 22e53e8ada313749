"""Data models used throughout the download pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .utils import image_extension, sanitize_filename


class DownloadStatus:
    """Outcome of a single screenshot download."""

    DOWNLOADED = "downloaded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class GameEntry:
    """A ranked game discovered on a results page."""

    rank: int
    title: str
    image_url: str

    def is_complete(self) -> bool:
        return self.rank >= 1 and bool(self.title) and bool(self.image_url)


@dataclass(frozen=True)
class CrawlCursor:
    """Current results page and its 1-based position in the crawl."""

    url: str
    page_number: int = 1

    def advance(self, next_url: Optional[str]) -> Optional["CrawlCursor"]:
        """Move to ``next_url`` unless it is missing or points back at this page."""
        if not next_url or next_url == self.url:
            return None
        return CrawlCursor(url=next_url, page_number=self.page_number + 1)


@dataclass
class DownloadRecord:
    """Destination naming and outcome for one entry."""

    entry: GameEntry
    status: Optional[str] = None

    @property
    def slug(self) -> str:
        return sanitize_filename(self.entry.title)

    @property
    def extension(self) -> str:
        return image_extension(self.entry.image_url)

    @property
    def filename(self) -> str:
        return f"{self.entry.rank}-{self.slug}{self.extension}"


@dataclass
class CrawlSummary:
    """Running totals for a crawl."""

    entries: List[DownloadRecord] = field(default_factory=list)
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0
    pages: int = 0
    first_page_entries: Optional[int] = None
    stopped_early: bool = False

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def is_hard_failure(self) -> bool:
        """True when the first page produced nothing to download."""
        return not self.first_page_entries

    def add(self, record: DownloadRecord) -> None:
        if record.status == DownloadStatus.DOWNLOADED:
            self.downloaded += 1
        elif record.status == DownloadStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
        self.entries.append(record)
