"""Configuration objects and constants for the thumbnailer."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .models import DownloadMode

logger = logging.getLogger("web_thumbnailer")

DEFAULT_ENV_PREFIX = "WEB_THUMBNAILER_"
DEFAULT_MAX_IMG_DL = 4 * 1024 * 1024
DEFAULT_CACHE_DURATION = 31 * 24 * 3600
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; web-thumbnailer/1.0)"
DEFAULT_SIZES = {"small": 160, "medium": 320, "large": 640}


def _parse_int(raw: Optional[str], default: int, name: str) -> int:
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("%s=%r is not an integer; using %s", name, raw, default)
        return default


def _parse_mode(raw: Optional[str], default: DownloadMode, name: str) -> DownloadMode:
    if raw is None:
        return default
    try:
        return DownloadMode(raw.strip().upper())
    except ValueError:
        logger.warning("%s=%r is not a download mode; using %s", name, raw, default.value)
        return default


@dataclass
class ThumbnailConfig:
    """Process-wide settings shared by every thumbnail request."""

    cache_dir: Path = Path("cache")
    default_max_width: int = 160
    default_max_height: int = 160
    default_download_mode: DownloadMode = DownloadMode.DOWNLOAD
    max_img_dl: int = DEFAULT_MAX_IMG_DL
    download_timeout: int = 30
    cache_duration: int = DEFAULT_CACHE_DURATION
    jpeg_quality: int = 85
    user_agent: str = DEFAULT_USER_AGENT
    sizes: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_SIZES))

    def get(self, key: str, default: Any = None) -> Any:
        """Return the named setting, or ``default`` when it is unset."""
        value = getattr(self, key, None)
        return default if value is None else value

    @classmethod
    def from_env(cls, prefix: str = DEFAULT_ENV_PREFIX) -> "ThumbnailConfig":
        """Build settings from ``<prefix>*`` environment variables."""
        defaults = cls()
        sizes = dict(defaults.sizes)
        for size_name in list(sizes):
            env_name = f"{prefix}SIZE_{size_name.upper()}"
            sizes[size_name] = _parse_int(os.getenv(env_name), sizes[size_name], env_name)

        cache_dir = os.getenv(f"{prefix}CACHE_DIR")
        config = cls(
            cache_dir=Path(cache_dir).expanduser() if cache_dir else defaults.cache_dir,
            default_max_width=_parse_int(
                os.getenv(f"{prefix}MAX_WIDTH"), defaults.default_max_width, f"{prefix}MAX_WIDTH"
            ),
            default_max_height=_parse_int(
                os.getenv(f"{prefix}MAX_HEIGHT"), defaults.default_max_height, f"{prefix}MAX_HEIGHT"
            ),
            default_download_mode=_parse_mode(
                os.getenv(f"{prefix}DOWNLOAD_MODE"),
                defaults.default_download_mode,
                f"{prefix}DOWNLOAD_MODE",
            ),
            max_img_dl=_parse_int(
                os.getenv(f"{prefix}MAX_IMG_DL"), defaults.max_img_dl, f"{prefix}MAX_IMG_DL"
            ),
            download_timeout=_parse_int(
                os.getenv(f"{prefix}DOWNLOAD_TIMEOUT"),
                defaults.download_timeout,
                f"{prefix}DOWNLOAD_TIMEOUT",
            ),
            cache_duration=_parse_int(
                os.getenv(f"{prefix}CACHE_DURATION"),
                defaults.cache_duration,
                f"{prefix}CACHE_DURATION",
            ),
            jpeg_quality=_parse_int(
                os.getenv(f"{prefix}JPEG_QUALITY"), defaults.jpeg_quality, f"{prefix}JPEG_QUALITY"
            ),
            user_agent=os.getenv(f"{prefix}USER_AGENT", defaults.user_agent),
            sizes=sizes,
        )
        logger.debug("Loaded thumbnailer settings from environment (prefix=%s)", prefix)
        return config
