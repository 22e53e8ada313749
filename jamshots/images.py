"""Image detection, listing and capability checks shared by the builders."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from filetype import guess
from PIL import Image, ImageOps, UnidentifiedImageError, features

from .utils import IMAGE_EXTENSIONS

logger = logging.getLogger("jamshots")


class ImageToolError(RuntimeError):
    """Raised when a wallpaper or animation cannot be produced."""


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def list_images(directory: Path) -> List[Path]:
    """Return screenshot files in ``directory`` sorted by filename."""
    if not directory.is_dir():
        return []
    return sorted(
        (
            path
            for path in directory.iterdir()
            if path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS
        ),
        key=lambda path: path.name,
    )


def rank_from_filename(path: Path) -> int:
    """Parse the rank prefix of ``"{rank}-{slug}{ext}"``; 0 when there is none."""
    prefix = path.name.split("-", 1)[0]
    digits = ""
    for char in prefix:
        if not char.isdigit():
            break
        digits += char
    return int(digits) if digits else 0


def sort_by_rank(paths: Iterable[Path]) -> List[Path]:
    return sorted(paths, key=rank_from_filename)


def missing_capabilities(paths: Iterable[Path], output_file: Path) -> List[str]:
    """List the Pillow features needed to read ``paths`` and write ``output_file`` that are absent."""
    Image.init()
    missing: List[str] = []
    if any(path.suffix.lower() == ".webp" for path in paths) and not features.check("webp"):
        missing.append("webp")
    fmt = output_format(output_file)
    if fmt is None or fmt not in Image.SAVE:
        missing.append(f"{output_file.suffix or 'unknown'} writer")
    if missing:
        logger.debug("Missing image capabilities: %s", ", ".join(missing))
    return missing


def output_format(path: Path) -> Optional[str]:
    """Pillow format name registered for the suffix of ``path``."""
    Image.init()
    return Image.registered_extensions().get(path.suffix.lower())


def fit_onto(image: Image.Image, size: Tuple[int, int], background: str) -> Image.Image:
    """Scale ``image`` to fit ``size`` and centre it on a background tile."""
    fitted = ImageOps.contain(image.convert("RGB"), size)
    tile = Image.new("RGB", size, background)
    offset = ((size[0] - fitted.width) // 2, (size[1] - fitted.height) // 2)
    tile.paste(fitted, offset)
    return tile


def read_image(path: Path) -> Image.Image:
    """Open and fully decode ``path`` as an RGB image."""
    try:
        with Image.open(path) as source:
            return source.convert("RGB")
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageToolError(f"Cannot read {path}: {exc}") from exc
