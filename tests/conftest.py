from __future__ import annotations

from typing import Dict, List, Tuple, Union

import pytest
import requests

from jamshots.config import ScraperConfig

BASE_URL = "https://itch.io/jam/test-jam/results"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32
WEBP_BYTES = b"RIFF\x24\x00\x00\x00WEBPVP8 " + b"\x00" * 32


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Union[str, bytes] = b"") -> None:
        self.status_code = status_code
        self.reason = "OK" if status_code < 400 else "Error"
        if isinstance(body, str):
            self.text = body
            self.content = body.encode("utf-8")
        else:
            self.content = body
            self.text = body.decode("latin-1")


class FakeSession:
    """Routes GET requests to canned responses and records every call."""

    def __init__(self, routes: Dict[str, object] | None = None) -> None:
        self.headers: Dict[str, str] = {}
        self.routes: Dict[str, object] = dict(routes or {})
        self.calls: List[Tuple[str, dict]] = []

    @property
    def requested_urls(self) -> List[str]:
        return [url for url, _ in self.calls]

    def get(self, url, *, headers=None, timeout=None, verify=None):
        self.calls.append((url, {"headers": headers, "timeout": timeout, "verify": verify}))
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, "")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, (FakeResponse, requests.Response)):
            return route
        return FakeResponse(200, route)


@pytest.fixture
def config(tmp_path) -> ScraperConfig:
    return ScraperConfig(base_url=BASE_URL, output_dir=tmp_path / "screenshots")


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


def ranked_game(rank_label: str, title: str, image_attr: str = "src", image_url: str = "") -> str:
    image = f'<img class="game_thumb" {image_attr}="{image_url}">' if image_url else ""
    return (
        '<div class="game_rank">'
        f"{image}"
        '<div class="game_summary">'
        f'<h2><a href="/games/{title}">{title}</a></h2>'
        f'<p>Ranked <strong class="ordinal_rank">{rank_label}</strong></p>'
        "</div></div>"
    )


def results_page(*games: str, next_href: str | None = None) -> str:
    pager = ""
    if next_href is not None:
        pager = f'<div class="pager"><a class="next_page" href="{next_href}">Next page</a></div>'
    return (
        "<html><head><title>Results</title></head><body>"
        f"{''.join(games)}{pager}"
        "</body></html>"
    )
