"""HTTP helpers for results pages and screenshot downloads."""

from __future__ import annotations

import logging
from typing import Optional

import requests
import urllib3

from .config import ScraperConfig

logger = logging.getLogger("jamshots")

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


def build_session(config: ScraperConfig) -> requests.Session:
    """Create the session shared by every request of a crawl."""
    session = requests.Session()
    if config.insecure_hosts:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return session


def _get(
    session: requests.Session,
    url: str,
    config: ScraperConfig,
    headers: Optional[dict] = None,
) -> Optional[requests.Response]:
    try:
        resp = session.get(
            url,
            headers={"User-Agent": config.user_agent, **(headers or {})},
            timeout=config.timeout,
            verify=config.verify_for(url),
        )
    except requests.RequestException as exc:
        logger.warning("Error fetching %s: %s", url, exc)
        return None
    if not 200 <= resp.status_code < 300:
        logger.warning("Failed to fetch %s: %s %s", url, resp.status_code, resp.reason)
        return None
    return resp


def fetch_page(
    session: requests.Session, url: str, config: ScraperConfig
) -> Optional[bytes]:
    """Return the raw HTML body of ``url`` or ``None`` when the request fails.

    The bytes are left undecoded so the parser can honour the page's own
    ``<meta charset>`` when the response header does not name one.
    """
    resp = _get(session, url, config, headers={"Accept": HTML_ACCEPT})
    if resp is None:
        return None
    return resp.content


def fetch_image(
    session: requests.Session, url: str, config: ScraperConfig
) -> Optional[bytes]:
    """Return the raw bytes of an image or ``None`` when the request fails."""
    resp = _get(session, url, config)
    if resp is None:
        return None
    return resp.content
