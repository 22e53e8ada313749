"""Command-line entry point for the jam screenshot tools."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, Sequence

from .animation import build_animation
from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_USER_AGENT,
    AnimationConfig,
    MontageConfig,
    ScraperConfig,
)
from .crawler import run_crawler
from .images import ImageToolError, list_images, missing_capabilities
from .wallpaper import build_wallpaper

logger = logging.getLogger("jamshots.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return ("download",)
    first = argv[0]
    if first in commands or first in ("-h", "--help"):
        return argv
    return ("download", *argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _add_download_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help="Jam results page to start crawling from",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_DIR,
        type=Path,
        help="Directory where screenshots should be written",
    )
    parser.add_argument(
        "--request-delay",
        type=float,
        default=1.5,
        help="Seconds to wait before fetching the next results page",
    )
    parser.add_argument(
        "--download-delay",
        type=float,
        default=0.5,
        help="Seconds to wait before each image download",
    )
    parser.add_argument(
        "--user-agent",
        default=DEFAULT_USER_AGENT,
        help="User-Agent header sent with every request",
    )
    parser.add_argument(
        "--insecure-host",
        action="append",
        dest="insecure_hosts",
        default=None,
        metavar="HOST",
        help="Skip TLS certificate checks for HOST and its subdomains (default: itch.io)",
    )
    parser.add_argument(
        "--no-verify-images",
        action="store_true",
        help="Save responses even when they do not look like images",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")


def _add_wallpaper_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input", default=DEFAULT_OUTPUT_DIR, type=Path, help="Screenshot directory")
    parser.add_argument("--output", default=Path("wallpaper.png"), type=Path, help="Wallpaper file")
    parser.add_argument("--width", type=int, default=3840, help="Wallpaper width in pixels")
    parser.add_argument("--height", type=int, default=2160, help="Wallpaper height in pixels")
    parser.add_argument(
        "--tile-width", type=int, default=315, help="Reference tile width (sets the aspect ratio)"
    )
    parser.add_argument(
        "--tile-height", type=int, default=250, help="Reference tile height (sets the aspect ratio)"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")


def _add_animation_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input", default=DEFAULT_OUTPUT_DIR, type=Path, help="Screenshot directory")
    parser.add_argument("--output", default=Path("animation.gif"), type=Path, help="GIF file")
    parser.add_argument(
        "--frame-duration",
        type=int,
        default=660,
        help="Milliseconds each frame is displayed",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Download game jam screenshots and turn them into a wallpaper or animation.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    download_parser = subparsers.add_parser(
        "download", help="Crawl the results listing and save ranked screenshots"
    )
    _add_download_arguments(download_parser)

    wallpaper_parser = subparsers.add_parser(
        "wallpaper", help="Arrange downloaded screenshots into a wallpaper grid"
    )
    _add_wallpaper_arguments(wallpaper_parser)

    animation_parser = subparsers.add_parser(
        "animation", help="Combine downloaded screenshots into a looping GIF"
    )
    _add_animation_arguments(animation_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _run_download(args: argparse.Namespace) -> int:
    config = ScraperConfig(
        base_url=args.base_url,
        output_dir=Path(args.output),
        request_delay=args.request_delay,
        download_delay=args.download_delay,
        user_agent=args.user_agent,
        verify_images=not args.no_verify_images,
    )
    if args.insecure_hosts is not None:
        config.insecure_hosts = tuple(args.insecure_hosts)

    overall_start = time.perf_counter()
    summary = run_crawler(config)
    logger.info(
        "Finished in %.2fs over %d page(s)%s",
        time.perf_counter() - overall_start,
        summary.pages,
        " (stopped early)" if summary.stopped_early else "",
    )
    if summary.is_hard_failure:
        logger.error("No games found on the first page; the page layout may have changed")
        return 1
    return 0


def _preflight(input_dir: Path, output_file: Path) -> bool:
    missing = missing_capabilities(list_images(input_dir), output_file)
    if missing:
        logger.error("Pillow is missing required support: %s", ", ".join(missing))
        return False
    return True


def _run_wallpaper(args: argparse.Namespace) -> int:
    config = MontageConfig(
        input_dir=args.input,
        output_file=args.output,
        width=args.width,
        height=args.height,
        tile_width=args.tile_width,
        tile_height=args.tile_height,
    )
    if not _preflight(config.input_dir, config.output_file):
        return 1
    build_wallpaper(config)
    return 0


def _run_animation(args: argparse.Namespace) -> int:
    config = AnimationConfig(
        input_dir=args.input,
        output_file=args.output,
        frame_duration_ms=args.frame_duration,
    )
    if not _preflight(config.input_dir, config.output_file):
        return 1
    build_animation(config)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    try:
        if args.command == "download":
            return _run_download(args)
        if args.command == "wallpaper":
            return _run_wallpaper(args)
        return _run_animation(args)
    except ImageToolError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
