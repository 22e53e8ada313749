"""Next-page discovery for paginated results listings."""

from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup

from .utils import resolve_href

_NEXT_TEXT = re.compile(r"next|›|»", re.IGNORECASE)


def find_next_page(soup: BeautifulSoup, current_url: str) -> Optional[str]:
    """Locate the "next page" link and return it as an absolute URL."""
    link = soup.select_one('a.next_page, a[rel="next"], .pager a.next')
    if link is None:
        for candidate in soup.select(".pager a, .pagination a"):
            if _NEXT_TEXT.search(candidate.get_text().strip()):
                link = candidate
                break
    if link is None:
        return None
    href = link.get("href")
    if not href or not href.strip():
        return None
    return resolve_href(href.strip(), current_url)
