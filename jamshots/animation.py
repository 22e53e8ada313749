"""Looping GIF of the screenshots in rank order."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from PIL import Image

from .config import AnimationConfig
from .images import (
    ImageToolError,
    fit_onto,
    list_images,
    output_format,
    read_image,
    sort_by_rank,
)

logger = logging.getLogger("jamshots")


def build_animation(config: AnimationConfig) -> Path:
    """Write every screenshot as one frame, ordered by rank prefix."""
    if output_format(config.output_file) != "GIF":
        raise ImageToolError(f"Animation output must be a .gif file, got {config.output_file}")
    images = sort_by_rank(list_images(config.input_dir))
    if not images:
        raise ImageToolError(f"No images found in {config.input_dir}")

    logger.info("Found %d images in %s", len(images), config.input_dir)
    logger.info(
        "Frame delay: %dms per frame, total ~%.1f seconds",
        config.frame_duration_ms,
        len(images) * config.frame_duration_ms / 1000,
    )

    frames: List[Image.Image] = []
    for path in images:
        frame = read_image(path)
        if frames:
            frame = fit_onto(frame, frames[0].size, "black")
        frames.append(frame)

    config.output_file.parent.mkdir(parents=True, exist_ok=True)
    frames[0].save(
        config.output_file,
        format="GIF",
        save_all=True,
        append_images=frames[1:],
        duration=config.frame_duration_ms,
        loop=config.loop,
    )
    size_mb = config.output_file.stat().st_size / 1024 / 1024
    logger.info(
        "Animation created: %s (%.2f MB, %d frames)", config.output_file, size_mb, len(frames)
    )
    return config.output_file
