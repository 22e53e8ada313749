"""Ranked game extraction from jam results pages.

Results markup is not stable, so extraction is an ordered chain of
independent structural guesses. Each strategy takes the parsed page and
returns complete :class:`GameEntry` records; the first strategy that finds
anything wins and later ones are never consulted.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from .config import ScraperConfig
from .models import GameEntry
from .utils import make_absolute_url

logger = logging.getLogger("jamshots")

# Deferred-load attributes first: ``src`` is often a placeholder.
IMAGE_ATTRIBUTES = ("data-lazy_src", "data-background_image", "data-src", "src")

_ORDINAL_RANK = re.compile(r"Ranked\s+(\d+)(?:st|nd|rd|th)", re.IGNORECASE)
_LEADING_RANK = re.compile(r"^#?(\d+)")
_FIRST_NUMBER = re.compile(r"\d+")
_NON_DIGITS = re.compile(r"\D")

Strategy = Callable[[BeautifulSoup, int, ScraperConfig], List[GameEntry]]


def _text(element: Optional[Tag]) -> str:
    if element is None:
        return ""
    return element.get_text().strip()


def _digits(text: str) -> int:
    digits = _NON_DIGITS.sub("", text)
    return int(digits) if digits else 0


def _first_number(text: str) -> int:
    match = _FIRST_NUMBER.search(text)
    return int(match.group()) if match else 0


def _image_url(img: Optional[Tag]) -> Optional[str]:
    if img is None:
        return None
    for attribute in IMAGE_ATTRIBUTES:
        value = img.get(attribute)
        if value and value.strip():
            return value.strip()
    return None


def _build_entry(
    rank: int, title: str, image_url: Optional[str], config: ScraperConfig
) -> Optional[GameEntry]:
    entry = GameEntry(
        rank=rank,
        title=title,
        image_url=make_absolute_url(image_url or "", config.site_root),
    )
    return entry if entry.is_complete() else None


def _collect(entries: Sequence[Optional[GameEntry]]) -> List[GameEntry]:
    return [entry for entry in entries if entry is not None]


def extract_ordinal_ranked(
    soup: BeautifulSoup, page_number: int, config: ScraperConfig
) -> List[GameEntry]:
    """Current itch.io layout: ``div.game_rank`` with a "Ranked 3rd" label."""
    games: List[Optional[GameEntry]] = []
    for wrapper in soup.select("div.game_rank"):
        summary = wrapper.select_one(".game_summary")
        if summary is None:
            continue
        title = _text(summary.select_one("h2 a"))

        rank = _digits(_text(summary.select_one("strong.ordinal_rank")))
        if not rank:
            match = _ORDINAL_RANK.search(summary.get_text())
            rank = int(match.group(1)) if match else 0

        image_url = _image_url(wrapper.select_one("img.game_thumb"))
        if not image_url:
            image_url = _image_url(wrapper.select_one("img"))

        if rank > 0 and title and not image_url:
            logger.warning("No image found for %s (rank %d)", title, rank)
            continue
        games.append(_build_entry(rank, title, image_url, config))
    return _collect(games)


def extract_rank_containers(
    soup: BeautifulSoup, page_number: int, config: ScraperConfig
) -> List[GameEntry]:
    """Cell wrappers carrying a separate rank column next to the game cell."""
    games: List[Optional[GameEntry]] = []
    for wrapper in soup.select(".game_cell_wrapper, .jam_game_cell"):
        rank = _first_number(_text(wrapper.select_one(".rank_column, .game_rank")))
        cell = wrapper.select_one(".game_cell, .game_thumb")
        if cell is None:
            continue
        title = _text(cell.select_one(".title, .game_title, a.title"))
        img = cell.select_one(".game_thumb img, img.thumb, .lazy_loaded, img")
        games.append(_build_entry(rank, title, _image_url(img), config))
    return _collect(games)


def extract_ranked_markers(
    soup: BeautifulSoup, page_number: int, config: ScraperConfig
) -> List[GameEntry]:
    """Any element whose class mentions "ranked" and whose text starts with a rank."""
    games: List[Optional[GameEntry]] = []
    for entry in soup.select('[class*="ranked"]'):
        match = _LEADING_RANK.match(entry.get_text().strip())
        rank = int(match.group(1)) if match else 0
        title = _text(entry.select_one(".title, a"))
        games.append(_build_entry(rank, title, _image_url(entry.select_one("img")), config))
    return _collect(games)


def extract_paginated_grid(
    soup: BeautifulSoup, page_number: int, config: ScraperConfig
) -> List[GameEntry]:
    """Plain game grid without ranks; ranks follow from page and position."""
    games: List[Optional[GameEntry]] = []
    cells = soup.select(".game_grid_widget .game_cell, .game_browser .game_cell")
    for index, cell in enumerate(cells, start=1):
        rank = (page_number - 1) * config.page_size + index
        title = _text(cell.select_one(".title"))
        img = cell.select_one("img, .thumb")
        games.append(_build_entry(rank, title, _image_url(img), config))
    return _collect(games)


def _generic_ranked_entries(soup: BeautifulSoup, config: ScraperConfig) -> List[GameEntry]:
    games: List[Optional[GameEntry]] = []
    for entry in soup.select(".game_rank, .ranked_game, [data-game_id]"):
        rank = _digits(
            _text(entry.select_one(".rank, .placement, .game_rank_number, .rank_value"))
        )
        title = _text(
            entry.select_one(".title, .game_title, .name a, h3 a, h2 a, a.title")
        )
        img = entry.select_one(
            "img.thumb, img.game_thumb, .thumb img, .screenshot img, img"
        )
        games.append(_build_entry(rank, title, _image_url(img), config))
    return _collect(games)


def _generic_game_cells(soup: BeautifulSoup, config: ScraperConfig) -> List[GameEntry]:
    games: List[Optional[GameEntry]] = []
    cells = soup.select(".jam_game, .game_cell, .game_thumb")
    for position, cell in enumerate(cells, start=1):
        title = _text(cell.select_one(".title, .game_title, .name, a.title, a.game_link"))
        rank_el = cell.select_one(".rank, .placement")
        if rank_el is None and isinstance(cell.parent, Tag):
            rank_el = cell.parent.select_one(".rank")
        rank = _digits(_text(rank_el)) or position
        games.append(_build_entry(rank, title, _image_url(cell.select_one("img")), config))
    return _collect(games)


def _generic_results(soup: BeautifulSoup, config: ScraperConfig) -> List[GameEntry]:
    games: List[Optional[GameEntry]] = []
    for entry in soup.select(".result, .entry"):
        rank = _digits(_text(entry.select_one('.rank, .place, [class*="rank"]')))
        title = _text(entry.select_one(".title, .name, h3, h2"))
        games.append(_build_entry(rank, title, _image_url(entry.select_one("img")), config))
    return _collect(games)


def extract_generic(
    soup: BeautifulSoup, page_number: int, config: ScraperConfig
) -> List[GameEntry]:
    """Last resort: older jam layouts and generic result lists."""
    for finder in (_generic_ranked_entries, _generic_game_cells, _generic_results):
        games = finder(soup, config)
        if games:
            return games
    return []


STRATEGIES: Sequence[Strategy] = (
    extract_ordinal_ranked,
    extract_rank_containers,
    extract_ranked_markers,
    extract_paginated_grid,
    extract_generic,
)


def extract_entries(
    soup: BeautifulSoup,
    page_number: int,
    config: Optional[ScraperConfig] = None,
) -> List[GameEntry]:
    """Return the entries found by the first strategy that finds any."""
    config = config or ScraperConfig()
    for strategy in STRATEGIES:
        games = strategy(soup, page_number, config)
        if games:
            logger.debug("%s matched %d entries", strategy.__name__, len(games))
            return games
    return []
