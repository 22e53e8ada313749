"""Configuration objects and constants for the scraper and image builders."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple
from urllib.parse import urlparse

DEFAULT_BASE_URL = "https://itch.io/jam/game-off-2025/results"
DEFAULT_SITE_ROOT = "https://itch.io"
DEFAULT_USER_AGENT = "GameJamScreenshotDownloader/1.0 (polite bot)"
DEFAULT_OUTPUT_DIR = Path("screenshots")
DEFAULT_PAGE_SIZE = 20


@dataclass
class ScraperConfig:
    """Settings that control crawling the results listing and saving screenshots."""

    base_url: str = DEFAULT_BASE_URL
    output_dir: Path = DEFAULT_OUTPUT_DIR
    request_delay: float = 1.5
    download_delay: float = 0.5
    user_agent: str = DEFAULT_USER_AGENT
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    page_size: int = DEFAULT_PAGE_SIZE
    site_root: str = DEFAULT_SITE_ROOT
    # Certificate checks are skipped for these hosts and their subdomains only.
    insecure_hosts: Tuple[str, ...] = ("itch.io",)
    verify_images: bool = True

    @property
    def timeout(self) -> Tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)

    def verify_for(self, url: str) -> bool:
        """Return whether TLS certificates should be verified for ``url``."""
        host = (urlparse(url).hostname or "").lower()
        for trusted in self.insecure_hosts:
            trusted = trusted.lower()
            if host == trusted or host.endswith("." + trusted):
                return False
        return True


@dataclass
class MontageConfig:
    """Settings for composing the wallpaper grid."""

    input_dir: Path = DEFAULT_OUTPUT_DIR
    output_file: Path = Path("wallpaper.png")
    width: int = 3840
    height: int = 2160
    tile_width: int = 315
    tile_height: int = 250
    background: str = "black"


@dataclass
class AnimationConfig:
    """Settings for the looping GIF built from ranked screenshots."""

    input_dir: Path = DEFAULT_OUTPUT_DIR
    output_file: Path = Path("animation.gif")
    frame_duration_ms: int = 660
    loop: int = 0
