"""Image detection, validation and thumbnail rendering utilities."""

from __future__ import annotations

import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple

from filetype import guess
from PIL import Image, ImageOps, UnidentifiedImageError, features

from .errors import GenerationFailedError, NotAnImageError, RequirementMissingError

logger = logging.getLogger("web_thumbnailer")

# Extensions accepted as direct thumbnail links. No GIF.
ACCEPTED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "bmp", "webp"}
DEFAULT_JPEG_QUALITY = 85


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def is_image_extension(extension: Optional[str]) -> bool:
    """Return True for extensions accepted as direct thumbnail links."""
    return bool(extension) and extension.lower() in ACCEPTED_IMAGE_EXTENSIONS


def looks_like_image(data: bytes) -> bool:
    """Return True when the payload carries an image file signature; Content-Type is ignored."""
    return bool(data) and detect_image_format(data) is not None


def check_requirements(cache_dir: Path) -> None:
    """Make sure thumbnails can be encoded and written under ``cache_dir``."""
    if not features.check_codec("jpg"):
        raise RequirementMissingError("Pillow was built without JPEG support")
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise RequirementMissingError(f"Cache directory {cache_dir} cannot be created: {exc}") from exc
    if not os.access(cache_dir, os.W_OK):
        raise RequirementMissingError(f"Cache directory {cache_dir} is not writable")


def fit_size(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Scale ``width x height`` into the bounding box, keeping the aspect ratio.

    A zero bound leaves that axis free. Images are never enlarged.
    """
    if max_width <= 0:
        ratio = max_height / float(height)
    elif max_height <= 0:
        ratio = max_width / float(width)
    else:
        ratio = min(max_width / float(width), max_height / float(height))
    ratio = min(ratio, 1.0)
    return max(1, int(round(width * ratio))), max(1, int(round(height * ratio)))


def _flatten(image: Image.Image) -> Image.Image:
    if image.mode in ("RGBA", "LA", "P"):
        image = image.convert("RGBA")
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _open_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise NotAnImageError(f"Downloaded content is not a readable image: {exc}") from exc
    return image


def _write_atomically(image: Image.Image, destination: Path, quality: int) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=str(destination.parent), prefix=f".{destination.name}.", suffix=".tmp"
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            image.save(handle, format="JPEG", quality=quality)
        os.replace(tmp_path, destination)
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise GenerationFailedError(destination) from exc


def generate_thumbnail(
    data: bytes,
    destination: Path,
    max_width: int,
    max_height: int,
    crop: bool = False,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> Path:
    """Resize ``data`` into the bounding box and store it as JPEG at ``destination``.

    With ``crop`` (and both bounds set) the result fills exactly
    ``max_width x max_height``. The file only appears once fully written.
    """
    with _open_image(data) as source:
        image = _flatten(source)
        if crop and max_width > 0 and max_height > 0:
            image = ImageOps.fit(image, (max_width, max_height), Image.Resampling.LANCZOS)
        else:
            new_size = fit_size(image.width, image.height, max_width, max_height)
            if new_size != image.size:
                image = image.resize(new_size, Image.Resampling.LANCZOS)
        _write_atomically(image, destination, quality)
    logger.debug("Wrote %dx%d thumbnail to %s", image.width, image.height, destination)
    return destination
