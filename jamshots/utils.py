"""Utility helpers for filename normalization and URL handling."""

from __future__ import annotations

import posixpath
import re
import unicodedata
from typing import Optional
from urllib.parse import urljoin, urlparse

from .config import DEFAULT_SITE_ROOT

INVALID_PATTERN = re.compile(r"[^a-z0-9-]")
HYPHEN_RUN_PATTERN = re.compile(r"-+")

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")
DEFAULT_EXTENSION = ".png"


def _is_separator(char: str) -> bool:
    return char.isspace() or unicodedata.category(char).startswith("P")


def sanitize_filename(title: str) -> str:
    """Turn a game title into a lower-case, hyphenated slug.

    Runs of whitespace and punctuation become a single hyphen and anything
    outside ``[a-z0-9-]`` is dropped. The result may be empty, and distinct
    titles may share a slug.
    """
    slug = "".join("-" if _is_separator(ch) else ch for ch in title.lower())
    slug = INVALID_PATTERN.sub("", slug)
    slug = HYPHEN_RUN_PATTERN.sub("-", slug)
    return slug.strip("-")


def image_extension(url: str) -> str:
    """Pick a file extension for an image URL, defaulting to ``.png``."""
    path = urlparse(url).path
    ext = posixpath.splitext(path)[1].lower().split("?")[0]
    return ext if ext in IMAGE_EXTENSIONS else DEFAULT_EXTENSION


def make_absolute_url(url: str, site_root: str = DEFAULT_SITE_ROOT) -> str:
    """Resolve protocol-relative and root-relative image references."""
    if url.startswith("http"):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith("/"):
        return f"{site_root.rstrip('/')}{url}"
    return url


def resolve_href(href: Optional[str], current_url: str) -> Optional[str]:
    """Resolve a link ``href`` found on ``current_url`` to an absolute URL."""
    if not href:
        return None
    if href.startswith("/") and not href.startswith("//"):
        parsed = urlparse(current_url)
        return f"{parsed.scheme}://{parsed.netloc}{href}"
    if href.startswith("http"):
        return href
    return urljoin(current_url, href)
